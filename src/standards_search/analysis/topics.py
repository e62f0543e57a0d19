"""Predefined comparison topics."""

from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional


@dataclass(frozen=True)
class Topic:
    """A named keyword set used to compare standards on one theme."""
    id: int
    name: str
    description: str
    keywords: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "keywords": list(self.keywords),
        }


COMPARISON_TOPICS: List[Topic] = [
    Topic(
        id=1,
        name="Risk Management",
        description="Compare risk management approaches across standards",
        keywords=["risk", "threat", "opportunity", "mitigation", "assessment", "uncertainty", "probability", "impact"],
    ),
    Topic(
        id=2,
        name="Stakeholder Management",
        description="Compare stakeholder engagement strategies",
        keywords=["stakeholder", "engagement", "communication", "expectations", "influence", "interest", "power"],
    ),
    Topic(
        id=3,
        name="Quality Management",
        description="Compare quality assurance and control processes",
        keywords=["quality", "assurance", "control", "verification", "validation", "testing", "review", "audit"],
    ),
    Topic(
        id=4,
        name="Project Planning",
        description="Compare project planning methodologies",
        keywords=["planning", "schedule", "timeline", "milestone", "deliverable", "work breakdown", "estimation"],
    ),
    Topic(
        id=5,
        name="Team Management",
        description="Compare team leadership and management approaches",
        keywords=["team", "leadership", "management", "motivation", "performance", "collaboration", "development"],
    ),
    Topic(
        id=6,
        name="Communication",
        description="Compare communication strategies and practices",
        keywords=["communication", "reporting", "meeting", "information", "documentation", "presentation"],
    ),
]

# Themes reported by the insights overview
COMMON_TOPICS: List[str] = [
    "Risk Management", "Stakeholder Engagement", "Quality Management",
    "Project Planning", "Team Management", "Communication",
    "Change Management", "Resource Management", "Time Management",
    "Cost Management", "Scope Management", "Integration Management",
]


def get_topic(topic_id: int) -> Optional[Topic]:
    for topic in COMPARISON_TOPICS:
        if topic.id == topic_id:
            return topic
    return None
