"""Cross-standard comparison and insight generation."""

import asyncio
import logging
from datetime import datetime, timezone
from typing import List, Dict, Any, Optional, Sequence

from ..ai.client import GenerativeAIClient, extract_json_block
from ..core.engine import RelevanceSearchEngine
from ..core.exceptions import AIProviderError
from ..data.repository import StandardsRepository
from ..models.result import StandardGroup
from .topics import Topic, COMMON_TOPICS

logger = logging.getLogger(__name__)

SECTIONS_PER_STANDARD = 5
TOP_TOPICS = 10


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def fallback_similarities(topic: Topic) -> List[str]:
    return [
        f"All standards emphasize the importance of {topic.name.lower()} in project success",
        "Common themes include planning, monitoring, and continuous improvement",
        "All approaches recognize the need for stakeholder involvement",
        "Risk identification and assessment are fundamental across all standards",
    ]


def fallback_differences() -> List[str]:
    return [
        "PMBOK focuses on knowledge areas while PRINCE2 emphasizes processes",
        "ISO standards provide more detailed technical specifications",
        "PRINCE2 has a stronger emphasis on business justification",
        "Different terminology and frameworks are used across standards",
    ]


def fallback_overall_summary(topic: Topic, standard_count: int) -> str:
    return (
        f"Analysis of {topic.name} across {standard_count} standards. This comparison highlights "
        f"how different project management standards approach {topic.name.lower()}."
    )


def fallback_standard_summary(group: StandardGroup, topic: Topic) -> str:
    """Deterministic per-standard summary used when the AI is unavailable."""
    return (
        f"This standard covers {topic.name.lower()} across {group.count} sections with an average "
        f"relevance score of {group.mean_score:.1f}. The approach emphasizes practical "
        f"implementation and real-world application."
    )


class ComparisonAnalyzer:
    """
    Compares how standards treat a topic.

    Topic comparisons rank sections by keyword tally and ask the AI
    provider for a narrative; every AI failure degrades to fixed text.
    """

    def __init__(
        self,
        repository: StandardsRepository,
        engine: RelevanceSearchEngine,
        ai_client: GenerativeAIClient
    ):
        self.repository = repository
        self.engine = engine
        self.ai_client = ai_client

    # ------------------------------------------------------------------
    # Topic comparison (AI with fallback)
    # ------------------------------------------------------------------

    async def compare_topic(self, topic: Topic) -> Dict[str, Any]:
        """
        Build the comparison for a predefined topic.

        Returns:
            {topic, comparisonData: {overallSummary, standards, keySimilarities,
            keyDifferences, aiGenerated}, generatedAt}
        """
        results = self.engine.rank_by_keywords(self.repository.get_sections(), topic.keywords)
        groups = self.engine.group_by_standard(results)

        insights = await self._insights(groups, topic)
        summaries = await asyncio.gather(*(self._standard_summary(group, topic) for group in groups))

        standards = []
        for group, summary in zip(groups, summaries):
            standard = self.repository.get_standard(group.standard_id)
            standards.append({
                "standardId": standard.id,
                "standardTitle": standard.title,
                "summary": summary,
                "averageRelevance": round(group.mean_score, 2),
                "relevantSections": [
                    {
                        "sectionTitle": r.record.title,
                        "sectionId": r.record.id,
                        "anchorId": r.record.anchor_id,
                        "sectionNumber": r.record.section_number,
                        "relevanceScore": int(r.score),
                    }
                    for r in group.results[:SECTIONS_PER_STANDARD]
                ],
            })

        return {
            "topic": topic.to_dict(),
            "comparisonData": {
                "overallSummary": insights["overallSummary"],
                "standards": standards,
                "keySimilarities": insights["similarities"],
                "keyDifferences": insights["differences"],
                "aiGenerated": insights["aiGenerated"],
            },
            "generatedAt": utc_now_iso(),
        }

    async def _insights(self, groups: Sequence[StandardGroup], topic: Topic) -> Dict[str, Any]:
        fallback = {
            "overallSummary": fallback_overall_summary(topic, len(groups)),
            "similarities": fallback_similarities(topic),
            "differences": fallback_differences(),
            "aiGenerated": False,
        }
        if not groups or not self.ai_client.enabled:
            return fallback

        standard_names = ", ".join(self.repository.get_standard(g.standard_id).title for g in groups)
        prompt = f"""
Analyze how different project management standards approach "{topic.name}".

Standards being compared: {standard_names}
Topic: {topic.name}
Description: {topic.description}

Based on the content from these standards, provide:
1. An overall summary (2-3 sentences) explaining how these standards approach {topic.name.lower()}
2. 4-5 key similarities between the standards
3. 4-5 key differences between the standards

Format your response as JSON:
{{
  "overallSummary": "string",
  "similarities": ["string1", "string2", "string3", "string4"],
  "differences": ["string1", "string2", "string3", "string4"]
}}

Focus on practical differences in methodology, terminology, and approach. Be specific and actionable.
"""
        try:
            text = await self.ai_client.generate(prompt)
        except AIProviderError as e:
            logger.warning(f"AI insights failed for '{topic.name}', using fallback: {e}")
            return fallback

        parsed = extract_json_block(text)
        if not parsed or not isinstance(parsed.get("overallSummary"), str):
            logger.warning(f"AI insights for '{topic.name}' were not valid JSON, using fallback")
            return fallback

        return {
            "overallSummary": parsed["overallSummary"],
            "similarities": self._string_list(parsed.get("similarities")) or fallback["similarities"],
            "differences": self._string_list(parsed.get("differences")) or fallback["differences"],
            "aiGenerated": True,
        }

    async def _standard_summary(self, group: StandardGroup, topic: Topic) -> str:
        if not self.ai_client.enabled:
            return fallback_standard_summary(group, topic)

        standard_title = self.repository.get_standard(group.standard_id).title
        section_titles = ", ".join(r.record.title for r in group.results)
        prompt = f"""
Analyze how "{standard_title}" approaches "{topic.name}".

Standard: {standard_title}
Topic: {topic.name}
Relevant sections: {section_titles}

Provide a 2-3 sentence summary explaining how this specific standard approaches {topic.name.lower()}.
Focus on the unique aspects, methodology, and practical approach of this standard.

Be concise and specific about what makes this standard's approach distinctive.
"""
        try:
            return (await self.ai_client.generate(prompt)).strip()
        except AIProviderError as e:
            logger.warning(f"AI summary failed for '{standard_title}', using fallback: {e}")
            return fallback_standard_summary(group, topic)

    @staticmethod
    def _string_list(value: Any) -> List[str]:
        if not isinstance(value, list):
            return []
        return [str(item) for item in value if isinstance(item, (str, int, float)) and str(item).strip()]

    # ------------------------------------------------------------------
    # Free-text comparison (no AI)
    # ------------------------------------------------------------------

    def compare(self, topic_text: str, standard_ids: Optional[Sequence[int]] = None) -> Dict[str, Any]:
        """Find sections matching a topic across the selected standards, grouped by standard."""
        records = self.repository.get_sections(standard_ids=standard_ids or None)
        results = self.engine.rank_and_limit(records, topic_text, limit=None)
        groups = self.engine.group_by_standard(results)

        return {
            "topic": topic_text,
            "totalSections": len(results),
            "standardsCompared": len(groups),
            "results": [
                {
                    "standard": self.repository.standard_summary(group.standard_id),
                    "averageScore": round(group.mean_score, 4),
                    "sections": [
                        r.to_dict(
                            standard=self.repository.standard_summary(group.standard_id),
                            chapter=self.repository.chapter_summary(r.record.chapter_id),
                        )
                        for r in group.results
                    ],
                }
                for group in groups
            ],
            "generatedAt": utc_now_iso(),
        }

    # ------------------------------------------------------------------
    # Corpus overview
    # ------------------------------------------------------------------

    def insights(self) -> Dict[str, Any]:
        """Overall statistics and coverage of common topics."""
        standards = self.repository.list_standards()
        sections = self.repository.get_sections()
        total_sections = len(sections)
        total_words = self.repository.total_words()

        coverage = []
        for topic in COMMON_TOPICS:
            needle = topic.lower()
            matching = [
                s for s in sections
                if needle in s.title.lower() or needle in s.content.lower()
            ]
            if not matching:
                continue
            coverage.append({
                "topic": topic,
                "coverage": len(matching),
                "standards": len({s.standard_id for s in matching}),
            })
        coverage.sort(key=lambda item: (-item["coverage"], item["topic"]))

        return {
            "standards": standards,
            "totalStandards": len(standards),
            "totalSections": total_sections,
            "totalChapters": self.repository.chapter_count(),
            "totalWords": total_words,
            "averageWordsPerSection": round(total_words / total_sections) if total_sections else 0,
            "topicCoverage": coverage[:TOP_TOPICS],
            "generatedAt": utc_now_iso(),
        }
