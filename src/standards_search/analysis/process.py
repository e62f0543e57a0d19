"""Tailored process generation with evidence citations."""

import json
import logging
from typing import List, Dict, Any, Optional

from ..ai.client import GenerativeAIClient, extract_json_block
from ..core.engine import RelevanceSearchEngine
from ..core.exceptions import AIProviderError
from ..data.repository import StandardsRepository
from ..models.query import ProcessRequestModel
from ..models.result import ScoredResult
from .comparison import utc_now_iso

logger = logging.getLogger(__name__)

EVIDENCE_POOL_SIZE = 30
CITATIONS_PER_ACTIVITY = 3

LIFECYCLE_PHASES: Dict[str, List[str]] = {
    "predictive": ["Initiation", "Planning", "Execution", "Monitoring & Control", "Closure"],
    "agile": ["Envision", "Backlog & Planning", "Sprints", "Review & Retrospective", "Release/Close"],
    "hybrid": ["Initiate", "Plan", "Iterate & Build", "Control & Assure", "Close"],
}
DEFAULT_LIFECYCLE = "hybrid"

ACTIVITY_SEEDS: Dict[str, List[str]] = {
    "Initiation": ["Define objectives", "Identify stakeholders", "Business case/charter"],
    "Planning": ["Scope & WBS", "Schedule baseline", "Cost baseline", "Risk register", "Quality plan", "Comms plan"],
    "Execution": ["Deliver work packages", "Manage team", "Engage stakeholders", "Quality assurance"],
    "Monitoring & Control": ["Performance reporting", "Change control", "Risk & issue management"],
    "Closure": ["Transition/benefits", "Lessons learned", "Archive"],
    "Envision": ["Vision & outcomes", "Roadmap", "Team formation"],
    "Backlog & Planning": ["Product backlog", "Prioritization", "Sprint planning"],
    "Sprints": ["Build increment", "Daily coordination", "Quality checks"],
    "Review & Retrospective": ["Sprint review/demo", "Retrospective improvements"],
    "Release/Close": ["Release management", "Support handover"],
    "Iterate & Build": ["Incremental delivery", "Stakeholder feedback", "QA gates"],
    "Control & Assure": ["KPIs & reports", "Risk/Change boards", "Compliance checks"],
}
DEFAULT_ACTIVITIES = ["Tailored activity"]

BASE_KEYWORDS = [
    "risk", "stakeholder", "quality", "schedule", "scope", "cost", "communication",
    "change", "governance", "planning", "agile", "iteration", "benefits",
]


class ProcessGenerator:
    """
    Designs a phase/activity process for a project and cites supporting
    sections of the loaded standards for every activity.
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

    async def generate(self, request: ProcessRequestModel) -> Dict[str, Any]:
        """
        Generate a tailored process.

        Returns:
            {summary, lifecycle, phases: [{name, activities: [{name,
            deliverables, citations}]}], aiGenerated, generatedAt}
        """
        lifecycle = request.lifecycle.lower() if request.lifecycle else DEFAULT_LIFECYCLE
        if lifecycle not in LIFECYCLE_PHASES:
            logger.info(f"Unknown lifecycle '{request.lifecycle}', using {DEFAULT_LIFECYCLE}")
            lifecycle = DEFAULT_LIFECYCLE
        phases = LIFECYCLE_PHASES[lifecycle]

        keywords = self.build_keywords(request)
        evidence = self.engine.rank_by_keywords(
            self.repository.get_sections(), keywords, limit=EVIDENCE_POOL_SIZE
        )
        evidence_records = [result.record for result in evidence]

        ai_steps = await self._synthesize_steps(request, lifecycle, phases, evidence)

        phase_payload = []
        for phase_name in phases:
            activity_names = (ai_steps or {}).get(phase_name) or ACTIVITY_SEEDS.get(phase_name, DEFAULT_ACTIVITIES)
            activities = []
            for name in activity_names:
                activities.append({
                    "name": name,
                    "deliverables": [],
                    "citations": self.cite(name, evidence_records),
                })
            phase_payload.append({"name": phase_name, "activities": activities})

        constraint_text = ", ".join(request.constraints)
        driver_text = ", ".join(request.drivers)
        summary = (
            f"Tailored process for {request.projectName or 'your project'} ({request.scenarioId}, {lifecycle}). "
            f"Constraints: {constraint_text or 'n/a'}. Drivers: {driver_text or 'n/a'}."
        )

        return {
            "summary": summary,
            "lifecycle": lifecycle,
            "phases": phase_payload,
            "aiGenerated": ai_steps is not None,
            "generatedAt": utc_now_iso(),
        }

    @staticmethod
    def build_keywords(request: ProcessRequestModel) -> List[str]:
        """Base keywords plus the request's constraints and drivers, lowercased."""
        keywords = list(BASE_KEYWORDS)
        for term in list(request.constraints) + list(request.drivers):
            kw = term.strip().lower()
            if kw and kw not in keywords:
                keywords.append(kw)
        return keywords

    def cite(self, activity_name: str, evidence_records) -> List[Dict[str, Any]]:
        """Rank the evidence pool against an activity's words and cite the best sections."""
        activity_keywords = self.engine.text_processor.extract_keywords(activity_name)
        if not activity_keywords:
            return []
        ranked = self.engine.rank_by_keywords(evidence_records, activity_keywords, limit=CITATIONS_PER_ACTIVITY)
        return [self._citation(result) for result in ranked]

    def _citation(self, result: ScoredResult) -> Dict[str, Any]:
        record = result.record
        standard = self.repository.get_standard(record.standard_id)
        return {
            "standardId": standard.id,
            "standardTitle": standard.title,
            "sectionId": record.id,
            "sectionNumber": record.section_number,
            "anchorId": record.anchor_id,
            "title": record.title,
            "score": int(result.score),
        }

    async def _synthesize_steps(
        self,
        request: ProcessRequestModel,
        lifecycle: str,
        phases: List[str],
        evidence: List[ScoredResult]
    ) -> Optional[Dict[str, List[str]]]:
        """Ask the AI for steps per phase; None means use the seed activities."""
        if not self.ai_client.enabled:
            return None

        corpus_summary = "\n".join(
            f"- {self.repository.get_standard(r.record.standard_id).title} - "
            f"{r.record.section_number} {r.record.title}"
            for r in evidence
        )
        prompt = (
            f"Design a tailored project process for a {request.scenarioId} project. Lifecycle: {lifecycle}. "
            f"Drivers: {', '.join(request.drivers)}. Constraints: {', '.join(request.constraints)}.\n"
            f"Use concise, actionable steps grouped by phases {json.dumps(phases)}. "
            f'Output strict JSON {{ "phases": {{ "<phase>": ["step", ...] }}, "summary": "..." }}.\n'
            f"Evidence context (titles only):\n{corpus_summary}"
        )

        try:
            text = await self.ai_client.generate(prompt)
        except AIProviderError as e:
            logger.warning(f"AI process synthesis failed, using heuristic generator: {e}")
            return None

        parsed = extract_json_block(text)
        steps = parsed.get("phases") if parsed else None
        if not isinstance(steps, dict):
            logger.warning("AI process synthesis returned no phases, using heuristic generator")
            return None

        cleaned = {}
        for phase, items in steps.items():
            if isinstance(items, list):
                names = [str(item).strip() for item in items if str(item).strip()]
                if names:
                    cleaned[str(phase)] = names
        return cleaned or None
