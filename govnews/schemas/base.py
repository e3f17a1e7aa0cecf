"""
Common enums shared by the fetch pipeline and the read API.

Enum values are the exact strings stored in the ``news_articles`` table and
returned to the client, so they stay in Japanese.
"""

from enum import Enum


class Source(str, Enum):
    """Government agency a news item came from."""
    MHLW = "厚生労働省"          # Ministry of Health, Labour and Welfare (RSS)
    ISA = "出入国在留管理庁"      # Immigration Services Agency (HTML)
    MOJ = "法務省"               # Ministry of Justice (HTML)


class Relevance(str, Enum):
    """Relevance tier assigned by the Gemini filter."""
    HIGH = "high"
    MEDIUM = "medium"


class Category(str, Enum):
    """Topic category assigned by the Gemini filter."""
    RESIDENCE_STATUS = "在留資格"
    LABOR_LAW = "労働法規"
    SPECIFIED_SKILLED = "特定技能"
    TECHNICAL_INTERN = "技能実習"
    IMMIGRATION_ACT = "入管法"
    SOCIAL_INSURANCE = "社会保険"
    OTHER = "その他"
