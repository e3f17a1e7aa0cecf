"""
Gemini relevance filter for government news candidates.

All candidates go to Gemini in one prompt as numbered lines. The model picks
the items that matter to an HR team at a manufacturer employing foreign
workers and returns ``[{index, summary, relevance, category}]``. Indices are
mapped back onto the candidate list.

The filter never fails the pipeline. If Gemini is unreachable, answers
non-2xx, or replies with nothing parseable, the first
``filter_fallback_limit`` candidates pass through unenriched
(summary=None, relevance="medium", category="その他") and the result is
flagged ``ai_filtered=False``.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional

from ..config import Settings
from ..schemas import Category, FilteredArticle, NewsItem, Relevance
from .json_repair import parse_json_array
from .llm_tool import LLMTool

logger = logging.getLogger(__name__)

MAX_SELECTIONS = 15

FILTER_PROMPT = """以下は日本の政府機関の最新ニュース一覧です。

{item_list}

あなたは製造業で外国人労働者を雇用している企業の人事担当者をサポートしています。
上記のニュースから、以下のいずれかに該当する記事を最大{max_selections}件選んでください：

1. 在留資格・ビザに関する制度変更や新制度
2. 外国人雇用・労働に関する法改正や通達
3. 特定技能・技能実習（育成就労）に関する情報
4. 入管法改正に関する情報
5. 製造業に影響する労働法規の変更
6. 外国人労働者の社会保険・労災に関する情報
7. 技能検定・日本語試験に関する情報

選んだ各記事について以下のJSON形式で出力してください。JSON配列のみを出力し、他のテキストは含めないでください：
[
  {{
    "index": 記事番号,
    "summary": "この記事が製造業の人事にどう影響するか1-2文で要約",
    "relevance": "high" または "medium",
    "category": "在留資格" | "労働法規" | "特定技能" | "技能実習" | "入管法" | "社会保険" | "その他"
  }}
]

該当する記事がない場合は空配列 [] を返してください。"""


@dataclass
class FilterResult:
    articles: List[FilteredArticle] = field(default_factory=list)
    ai_filtered: bool = True


def build_prompt(items: List[NewsItem]) -> str:
    item_list = "\n".join(f"{i}: [{item.source}] {item.title}" for i, item in enumerate(items))
    return FILTER_PROMPT.format(item_list=item_list, max_selections=MAX_SELECTIONS)


class RelevanceFilter:
    """Selects and enriches relevant candidates with one Gemini call."""

    def __init__(self, settings: Settings, llm: LLMTool):
        self.settings = settings
        self.llm = llm

    async def filter(self, items: List[NewsItem]) -> FilterResult:
        if not items:
            return FilterResult(articles=[], ai_filtered=True)

        try:
            reply = await self.llm.generate(build_prompt(items), default="[]")
            selections = parse_json_array(reply)
            if selections is None:
                logger.warning("Relevance filter: unparseable Gemini reply, passing candidates through")
                return self.fallback(items)
            articles = self.map_selections(items, selections)
        except Exception as e:
            logger.warning(f"Relevance filter failed, passing candidates through: {e}")
            return self.fallback(items)

        logger.info(f"Relevance filter: {len(articles)}/{len(items)} candidates selected")
        return FilterResult(articles=articles, ai_filtered=True)

    def map_selections(self, items: List[NewsItem], selections: List[Any]) -> List[FilteredArticle]:
        """Map model selections back onto candidates, skipping anything unusable."""
        articles: List[FilteredArticle] = []
        seen = set()
        for sel in selections:
            index = self._selection_index(sel, len(items))
            if index is None or index in seen:
                continue
            item = items[index]
            if not item.title:
                continue
            seen.add(index)
            articles.append(FilteredArticle(
                **item.model_dump(),
                summary=sel.get("summary"),
                relevance=sel.get("relevance"),
                category=sel.get("category"),
            ))
        return articles

    @staticmethod
    def _selection_index(sel: Any, count: int) -> Optional[int]:
        if not isinstance(sel, dict):
            return None
        index = sel.get("index")
        # bool is an int subclass; "true" is not an index
        if isinstance(index, bool):
            return None
        if isinstance(index, str) and index.strip().isdigit():
            index = int(index.strip())
        if not isinstance(index, int):
            return None
        if not 0 <= index < count:
            return None
        return index

    def fallback(self, items: List[NewsItem]) -> FilterResult:
        limit = self.settings.filter_fallback_limit
        articles = [
            FilteredArticle(
                **item.model_dump(),
                summary=None,
                relevance=Relevance.MEDIUM.value,
                category=Category.OTHER.value,
            )
            for item in items[:limit]
        ]
        return FilterResult(articles=articles, ai_filtered=False)
