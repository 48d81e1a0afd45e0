"""Text cleanup and keyword tagging for collected news."""

from __future__ import annotations

import re

from bs4 import BeautifulSoup

_WHITESPACE = re.compile(r"\s+")

INVESTMENT_KEYWORDS: tuple[str, ...] = (
    # equities
    "주식", "stock", "equity", "상장", "IPO", "배당", "dividend",
    # bonds
    "채권", "bond", "국채", "회사채", "수익률", "yield",
    # currencies
    "달러", "유로", "엔화", "원화", "위안", "환율", "currency", "exchange rate",
    # rates and central banks
    "금리", "interest rate", "기준금리", "base rate", "연준", "Fed", "ECB", "한국은행",
    # macro indicators
    "인플레이션", "inflation", "CPI", "GDP", "고용", "employment", "실업률",
    # regions
    "미국", "중국", "유럽", "일본", "한국", "아시아", "신흥국",
    # sectors
    "기술주", "tech", "금융주", "financial", "에너지", "energy", "헬스케어", "healthcare",
    "부동산", "real estate", "소비재", "consumer", "산업재", "industrial",
    # commodities
    "금", "gold", "은", "silver", "구리", "copper", "석유", "oil", "가스", "gas",
    # crypto
    "비트코인", "bitcoin", "이더리움", "ethereum", "암호화폐", "crypto",
    # funds and portfolio
    "펀드", "fund", "ETF", "포트폴리오", "portfolio", "리스크", "risk",
)


def clean_text(text: str | None) -> str:
    if not text:
        return ""
    return _WHITESPACE.sub(" ", text).strip()


def clean_content(raw_html: str | None) -> str:
    """Strip markup from a feed body and collapse all whitespace runs."""
    if not raw_html:
        return ""
    text = BeautifulSoup(raw_html, "html.parser").get_text(" ")
    return clean_text(text)


def build_content(title: str, body: str, max_chars: int = 2000, min_chars: int = 50) -> str:
    """Pad bodies shorter than ``min_chars`` with the title, then truncate."""
    content = body
    if len(content) < min_chars:
        content = f"{title}. {content}".strip()
    return content[:max_chars]


def extract_tags(text: str, category: str | None) -> list[str]:
    lowered = text.lower()
    found = [keyword for keyword in INVESTMENT_KEYWORDS if keyword.lower() in lowered]
    if category:
        found.append(category)
    return list(dict.fromkeys(found))
