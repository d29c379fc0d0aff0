"""Keyword-based article categorization."""

from typing import List, NamedTuple, Tuple

from ..models import Category


class CategoryRule(NamedTuple):
    """Keywords that place an article in a category."""

    category: Category
    title_keywords: Tuple[str, ...]
    content_keywords: Tuple[str, ...]


# Evaluated top to bottom, first match wins.
CATEGORY_RULES: List[CategoryRule] = [
    CategoryRule(
        Category.POLICY_PROPOSAL,
        ("政策", "提案", "policy", "proposal"),
        ("政策", "policy"),
    ),
    CategoryRule(
        Category.ACTIVITY_REPORT,
        ("活動", "報告", "activity report"),
        ("活動",),
    ),
    CategoryRule(
        Category.MUNICIPAL_INFO,
        ("市政", "議会", "city council", "municipal"),
        ("市政",),
    ),
    CategoryRule(
        Category.LOCAL_EVENT,
        ("イベント", "催し"),
        ("イベント",),
    ),
    CategoryRule(
        Category.NOTICE,
        ("お知らせ", "案内", "announcement"),
        ("お知らせ",),
    ),
]


def classify(title: str, content: str) -> Category:
    """Assign a category from title and content keywords."""
    title = (title or "").lower()
    content = (content or "").lower()

    for rule in CATEGORY_RULES:
        if any(keyword in title for keyword in rule.title_keywords):
            return rule.category
        if any(keyword in content for keyword in rule.content_keywords):
            return rule.category

    return Category.OTHER
