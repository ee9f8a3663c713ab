"""Sample redirect configurations used to seed a fresh local store."""

from datetime import datetime, timezone
from typing import List

from .storage.base import Record


def _day(year: int, month: int, day: int) -> datetime:
    return datetime(year, month, day, tzinfo=timezone.utc)


def sample_records() -> List[Record]:
    """Return fresh copies of the three demo configurations (global mode, no owner)."""
    return [
        {
            "id": "sample-product-1",
            "title": "Premium Leather Wallet - Handcrafted Excellence",
            "description": "Discover our premium handcrafted leather wallet made from full-grain leather. "
            "Perfect for the modern professional.",
            "image": "https://images.pexels.com/photos/1152077/pexels-photo-1152077.jpeg",
            "targetUrl": "https://example.com/products/leather-wallet",
            "keywords": "leather wallet, premium wallet, handcrafted leather",
            "siteName": "Premium Goods Store",
            "type": "product",
            "createdAt": _day(2024, 1, 15),
            "updatedAt": _day(2024, 1, 15),
        },
        {
            "id": "sample-service-1",
            "title": "Expert Web Design Services - Transform Your Online Presence",
            "description": "Professional web design services that transform your business. "
            "Custom designs, responsive layouts, and modern aesthetics.",
            "image": "https://images.pexels.com/photos/196644/pexels-photo-196644.jpeg",
            "targetUrl": "https://example.com/services/web-design",
            "keywords": "web design, website design, responsive design, UI/UX",
            "siteName": "Digital Agency Pro",
            "type": "service",
            "createdAt": _day(2024, 1, 10),
            "updatedAt": _day(2024, 1, 10),
        },
        {
            "id": "sample-article-1",
            "title": "10 Essential Tips for Effective Digital Marketing",
            "description": "Master digital marketing with these proven strategies. "
            "Learn SEO, social media marketing, and content creation techniques.",
            "image": "https://images.pexels.com/photos/270408/pexels-photo-270408.jpeg",
            "targetUrl": "https://example.com/blog/digital-marketing-tips",
            "keywords": "digital marketing, SEO, social media marketing, content marketing",
            "siteName": "Marketing Insights Blog",
            "type": "article",
            "createdAt": _day(2024, 1, 5),
            "updatedAt": _day(2024, 1, 5),
        },
    ]
