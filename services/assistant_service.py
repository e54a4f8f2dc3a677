# services/assistant_service.py
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import openai

from core.config import LLM_MODEL
from services.timer_service import FocusStrategy

logger = logging.getLogger(__name__)


class AssistantError(Exception):
    """Gateway failure with a message fit for the user."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status = status


def build_system_prompt(task: str, time_left: int, cycle_count: int) -> str:
    return f"""You are a multilingual Focus Assistant helping users maximize their productivity during work sessions.

Context:
- Current task: {task or 'Break time'}
- Time remaining: {int(time_left) // 60} minutes
- Completed cycles: {cycle_count}

You have access to tools to help users:
- Break down complex tasks into actionable steps
- Estimate time requirements for tasks
- Suggest proven focus techniques
- Recommend strategic break timing
- Recommend a work/break strategy for the day's goal

Use these tools proactively when they would help the user. Always respond in the user's language. Be concise, actionable, and encouraging."""


TOOLS: List[Dict[str, Any]] = [
    {
        "type": "function",
        "function": {
            "name": "recommend_daily_strategy",
            "description": ("Recommend a personalized focus strategy based on the user's daily goal. Adapt "
                            "work/break intervals to match the task type (e.g., 50/10 for coding, 25/5 for "
                            "exam prep, 45/15 for deep work)."),
            "parameters": {
                "type": "object",
                "properties": {
                    "strategyName": {"type": "string", "description": "Name of the strategy (e.g., 'Deep Work Blocks')"},
                    "workMinutes": {"type": "number", "description": "Duration of work intervals in minutes"},
                    "breakMinutes": {"type": "number", "description": "Duration of break intervals in minutes"},
                    "description": {"type": "string", "description": "Why this strategy works for this goal"},
                    "technique": {"type": "string", "description": "Productivity technique to apply (e.g., 'Active Recall')"},
                },
                "required": ["strategyName", "workMinutes", "breakMinutes", "description", "technique"],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "break_down_task",
            "description": "Break a complex task into smaller, manageable subtasks with clear steps",
            "parameters": {
                "type": "object",
                "properties": {
                    "task": {"type": "string", "description": "The task to break down"},
                    "subtasks": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "properties": {
                                "step": {"type": "string", "description": "A specific subtask or step"},
                                "estimatedMinutes": {"type": "number", "description": "Estimated time in minutes"},
                            },
                            "required": ["step", "estimatedMinutes"],
                        },
                    },
                },
                "required": ["task", "subtasks"],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "suggest_focus_technique",
            "description": "Recommend a specific focus technique based on the task and context",
            "parameters": {
                "type": "object",
                "properties": {
                    "technique": {
                        "type": "string",
                        "enum": ["deep-work", "time-blocking", "two-minute-rule", "eat-the-frog", "batching"],
                        "description": "The recommended focus technique",
                    },
                    "reason": {"type": "string", "description": "Why this technique fits the current situation"},
                    "howToApply": {"type": "string", "description": "Concrete steps to apply this technique"},
                },
                "required": ["technique", "reason", "howToApply"],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "estimate_task_duration",
            "description": "Provide a realistic time estimate for completing a task",
            "parameters": {
                "type": "object",
                "properties": {
                    "task": {"type": "string"},
                    "estimatedMinutes": {"type": "number", "description": "Estimated completion time"},
                    "pomodoroSessions": {"type": "number", "description": "Number of 25-min pomodoro sessions needed"},
                    "confidence": {"type": "string", "enum": ["high", "medium", "low"],
                                   "description": "Confidence level in this estimate"},
                    "factors": {"type": "array", "items": {"type": "string"},
                                "description": "Key factors affecting the estimate"},
                },
                "required": ["task", "estimatedMinutes", "pomodoroSessions", "confidence", "factors"],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "recommend_break_timing",
            "description": "Suggest when and how to take breaks based on current work session",
            "parameters": {
                "type": "object",
                "properties": {
                    "recommendation": {
                        "type": "string",
                        "enum": ["take-break-now", "continue-working", "short-break-soon", "long-break-needed"],
                        "description": "Break timing recommendation",
                    },
                    "reasoning": {"type": "string", "description": "Why this break timing is recommended"},
                    "breakActivity": {"type": "string", "description": "Suggested activity during the break"},
                },
                "required": ["recommendation", "reasoning", "breakActivity"],
            },
        },
    },
]

BREAK_EMOJI = {
    "take-break-now": "⏸️",
    "continue-working": "🎯",
    "short-break-soon": "⏰",
    "long-break-needed": "🌟",
}


def strategy_from_args(args: Dict[str, Any]) -> FocusStrategy:
    return FocusStrategy.from_minutes(
        name=str(args.get("strategyName", "Focus Strategy")),
        work_minutes=args.get("workMinutes", 25),
        break_minutes=args.get("breakMinutes", 5),
        description=str(args.get("description", "")),
        technique=str(args.get("technique", "")),
    )


def format_tool_result(name: str, args: Dict[str, Any]) -> str:
    """Markdown shown in the chat for a tool call."""
    if name == "break_down_task":
        steps = "\n".join(f"{i}. {s.get('step')} ({s.get('estimatedMinutes')} min)"
                          for i, s in enumerate(args.get("subtasks", []), start=1))
        return f"\n\n**Task Breakdown: {args.get('task', '')}**\n\n{steps}\n\n"

    if name == "suggest_focus_technique":
        return (f"\n\n**Recommended Technique: {str(args.get('technique', '')).upper()}**\n\n"
                f"**Why?** {args.get('reason', '')}\n\n"
                f"**How to apply:** {args.get('howToApply', '')}\n\n")

    if name == "estimate_task_duration":
        factors = "\n".join(f"• {f}" for f in args.get("factors", []))
        return (f"\n\n**Time Estimate for: {args.get('task', '')}**\n\n"
                f"⏱️ Estimated time: {args.get('estimatedMinutes')} minutes\n"
                f"🍅 Pomodoro sessions: {args.get('pomodoroSessions')}\n"
                f"📊 Confidence: {args.get('confidence')}\n\n"
                f"**Key factors:**\n{factors}\n\n")

    if name == "recommend_break_timing":
        emoji = BREAK_EMOJI.get(args.get("recommendation"), "💡")
        return (f"\n\n{emoji} **Break Recommendation**\n\n"
                f"{args.get('reasoning', '')}\n\n"
                f"**Suggested break activity:** {args.get('breakActivity', '')}\n\n")

    if name == "recommend_daily_strategy":
        return (f"\n\n🎯 **{args.get('strategyName', '')}**\n\n"
                f"⏱️ Work/Break: {args.get('workMinutes')}/{args.get('breakMinutes')} minutes\n\n"
                f"{args.get('description', '')}\n\n"
                f"💡 **Technique:** {args.get('technique', '')}\n\n"
                f"✅ Your timer has been automatically set to these intervals!")

    return ""


@dataclass
class AssistantReply:
    content: str
    strategy: Optional[FocusStrategy] = None
    tools_used: List[str] = field(default_factory=list)


class FocusAssistant:
    def __init__(self, client, model: str = LLM_MODEL):
        self.client = client
        self.model = model

    def reply(self, messages: List[Dict[str, str]], task: str = "",
              time_left: int = 0, cycle_count: int = 0) -> AssistantReply:
        if self.client is None:
            raise AssistantError("The Focus Assistant is not configured.")
        try:
            resp = self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "system", "content": build_system_prompt(task, time_left, cycle_count)},
                          *messages],
                tools=TOOLS,
            )
        except openai.RateLimitError:
            raise AssistantError("Rate limit exceeded. Please try again in a moment.", 429)
        except openai.APIStatusError as e:
            if e.status_code == 402:
                raise AssistantError("AI credits depleted. Please add credits to continue.", 402)
            logger.error("AI gateway error: %s %s", e.status_code, e)
            raise AssistantError("AI service error", e.status_code)
        except openai.OpenAIError as e:
            logger.error("Focus assistant error: %s", e)
            raise AssistantError("Failed to connect to Focus Assistant")

        if not resp.choices:
            raise AssistantError("No content received from AI")
        msg = resp.choices[0].message
        content = msg.content or ""
        strategy = None
        used = []
        for call in (msg.tool_calls or []):
            name = call.function.name
            try:
                args = json.loads(call.function.arguments or "{}")
            except ValueError:
                logger.warning("Unparsable arguments for tool %s: %r", name, call.function.arguments)
                continue
            try:
                rendered = format_tool_result(name, args)
                if name == "recommend_daily_strategy":
                    strategy = strategy_from_args(args)
            except (TypeError, ValueError, AttributeError) as e:
                logger.warning("Malformed arguments for tool %s: %r (%s)", name, args, e)
                continue
            used.append(name)
            content += rendered
        return AssistantReply(content=content.strip(), strategy=strategy, tools_used=used)
