# services/insights_service.py
import copy
import json
import logging
import re
from typing import Any, Dict, List

import openai

from core.config import LLM_MODEL
from core.constants import INSIGHT_TYPES

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = ("You are a productivity analytics expert. Analyze user data and provide "
                 "specific, actionable insights in JSON format only.")

FALLBACK_INSIGHTS: List[Dict[str, str]] = [
    {"title": "Peak Performance", "metric": "+12%",
     "description": "You're most productive in the morning. Schedule important tasks between 9-11 AM.",
     "type": "success"},
    {"title": "Focus Improvement", "metric": "+15min",
     "description": "Your average focus session increased by 15 minutes this month.",
     "type": "info"},
    {"title": "Break Reminder", "metric": "-8%",
     "description": "Consider taking more breaks - efficiency drops after 2h sessions.",
     "type": "warning"},
    {"title": "Weekly Progress", "metric": "85%",
     "description": "You're 85% towards your weekly focus time goal. Keep it up!",
     "type": "primary"},
]

_JSON_BLOCK = re.compile(r"\{[\s\S]*\}")


def build_insights_prompt(summary: Dict[str, Any]) -> str:
    hours = ", ".join(str(h) for h in summary.get("most_productive_hours", [])) or "n/a"
    return f"""Analyze this productivity data and generate 4 specific, actionable insights:

Data Summary:
- Total Focus Time (last 30 days): {summary.get('total_focus_hours', 0)} hours
- Tasks Completed: {summary.get('total_tasks', 0)}
- Average Efficiency: {summary.get('avg_efficiency', 0)}%
- Task Completion Rate: {summary.get('completion_rate', 0)}%
- Pomodoro Sessions: {summary.get('total_pomodoros', 0)}
- Most Productive Hours: {hours}
- Task Distribution: {json.dumps(summary.get('tasks_by_type', {}))}
- Recent Week: {json.dumps(summary.get('recent_days', []))}

Generate exactly 4 insights in this JSON format:
{{
  "insights": [
    {{
      "title": "Insight title (2-4 words)",
      "metric": "+12%" or "85%" or similar,
      "description": "One sentence actionable insight",
      "type": "success" | "info" | "warning" | "primary"
    }}
  ]
}}

Focus on:
1. Peak performance times and scheduling recommendations
2. Focus/efficiency trends (improvements or concerns)
3. Break patterns or session length optimization
4. Weekly/monthly progress and goal achievement

Be specific, data-driven, and actionable. Return ONLY the JSON object."""


def parse_insights(content: str) -> List[Dict[str, str]]:
    """Pull the JSON object out of a model reply. Raises ValueError when there is none."""
    if not content:
        raise ValueError("No content received from AI")
    match = _JSON_BLOCK.search(content)
    data = json.loads(match.group(0) if match else content)
    raw = data.get("insights") if isinstance(data, dict) else None
    if not isinstance(raw, list) or not raw:
        raise ValueError("Reply has no insights list")

    insights = []
    for item in raw:
        if not isinstance(item, dict) or not item.get("title"):
            continue
        kind = str(item.get("type", "info")).lower()
        insights.append({
            "title": str(item["title"]),
            "metric": str(item.get("metric", "")),
            "description": str(item.get("description", "")),
            "type": kind if kind in INSIGHT_TYPES else "info",
        })
    if not insights:
        raise ValueError("Reply has no usable insights")
    return insights


def generate_insights(client, summary: Dict[str, Any], model: str = LLM_MODEL) -> List[Dict[str, str]]:
    """Ask the LLM for four insights; any failure falls back to the static set."""
    if client is None:
        return copy.deepcopy(FALLBACK_INSIGHTS)
    try:
        resp = client.chat.completions.create(
            model=model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_insights_prompt(summary)},
            ],
        )
        content = resp.choices[0].message.content if resp.choices else None
        insights = parse_insights(content)
        logger.info("AI insights generated (%d)", len(insights))
        return insights
    except openai.OpenAIError as e:
        logger.error("AI gateway error while generating insights: %s", e)
    except ValueError as e:
        logger.error("Failed to parse insights from AI response: %s", e)
    return copy.deepcopy(FALLBACK_INSIGHTS)
