"""Composable LLM agents with a shared per-request turn budget.

An Agent wraps one LLMProvider and a fixed set of instructions. Other agents
can be exposed to it as tools (``agent.as_tool(...)``); the model asks for a
tool by replying with ``{"tool": "<name>", "prompt": "..."}`` and receives the
tool's answer as a continuation turn.

Every agent turn anywhere in the call tree of a top-level ``run()`` is
counted by one shared TurnMonitor. A turn is one entry into an agent: its
first model call plus the continuations that fold tool results back in. A
sub-agent past the budget reports the error to its caller as text, so the
caller can still answer with what it already has.
"""

from __future__ import annotations

import asyncio
import json
import logging
import threading
from typing import Callable, Sequence

from ..types import LLMProvider, TurnBudgetExceededError
from .output_parser import extract_json

logger = logging.getLogger(__name__)

# Tool rounds per _run()
_MAX_LOOPS = 5


class TurnMonitor:
    """Counts agent turns for one top-level request.

    Thread-safe: ``check_and_increment()`` is the only mutation and runs
    under a lock, so sibling sub-agents cannot race on the count.
    """

    def __init__(self, max_turns: int) -> None:
        if max_turns < 0:
            raise ValueError(f"max_turns must be >= 0, got {max_turns}")
        self.max_turns = max_turns
        self._current = 0
        self._lock = threading.Lock()

    @property
    def current_turn(self) -> int:
        with self._lock:
            return self._current

    def check_and_increment(self) -> None:
        """Claim one turn. Raises TurnBudgetExceededError past the budget."""
        with self._lock:
            self._current += 1
            if self._current > self.max_turns:
                raise TurnBudgetExceededError(self.max_turns)


class AgentTool:
    """Exposes an Agent to another Agent as a callable tool."""

    def __init__(self, name: str, description: str, agent: Agent) -> None:
        self.name = name
        self.description = description
        self.agent = agent

    async def call(self, prompt: str) -> str:
        """Run the sub-agent; errors come back as text the caller can act on."""
        logger.debug("[AgentTool] Running sub-agent: %s", self.name)
        try:
            return await self.agent._run(prompt)
        except Exception as e:
            logger.error("[AgentTool] Error in sub-agent %s: %s", self.name, e)
            hint = getattr(e, "recovery_hint", None)
            if hint:
                return f"Error: {e} \nSuggestion: {hint}"
            return f"Error: {e}"


class Agent:
    """A reusable LLM agent that can also serve as another agent's tool."""

    def __init__(
        self,
        name: str,
        instructions: str,
        llm_provider: LLMProvider,
        tools: Sequence[AgentTool] = (),
        prompt_transformer: Callable[[str], str] | None = None,
        max_tokens: int = 1024,
    ) -> None:
        self.name = name
        self.instructions = instructions
        self.llm = llm_provider
        self.tools = {t.name: t for t in tools}
        self.prompt_transformer = prompt_transformer
        self.max_tokens = max_tokens
        self.turn_monitor: TurnMonitor | None = None
        self._sub_agents = [t.agent for t in tools]
        self._run_lock = asyncio.Lock()

    async def run(self, prompt: str, max_turns: int | None = None) -> str:
        """Top-level entry point. Starts a fresh turn budget for this request."""
        async with self._run_lock:
            monitor = TurnMonitor(max_turns) if max_turns is not None else None
            self.set_turn_monitor(monitor)
            return await self._run(prompt)

    async def _run(self, prompt: str) -> str:
        """Answer one prompt, following tool requests. Claims one turn."""
        if self.turn_monitor is not None:
            self.turn_monitor.check_and_increment()
        final_prompt = self.prompt_transformer(prompt) if self.prompt_transformer else prompt
        system = self._system_prompt()

        text = await self._invoke(system, final_prompt)
        if not self.tools:
            return text

        transcript = final_prompt
        rounds = 0
        while True:
            request = self._tool_request(text)
            if request is None:
                return text
            if rounds >= _MAX_LOOPS:
                logger.warning(
                    "[Agent: %s] Tool loop exhausted %d rounds, returning last reply",
                    self.name, _MAX_LOOPS,
                )
                return text
            rounds += 1

            tool_name, tool_prompt = request
            result = await self.tools[tool_name].call(tool_prompt)
            transcript = (
                f"{transcript}\n\nYou called tool {tool_name!r} with: {tool_prompt}\n"
                f"Tool result:\n{result}\n\nContinue."
            )
            text = await self._invoke(system, transcript)

    async def _invoke(self, system: str, user: str) -> str:
        logger.debug("[Agent: %s] Responding to prompt...", self.name)
        content = await asyncio.to_thread(
            self.llm.complete, system=system, user=user, max_tokens=self.max_tokens,
        )
        logger.debug("[Agent: %s] content: %s", self.name, content)
        return content

    def _system_prompt(self) -> str:
        if not self.tools:
            return self.instructions
        lines = [
            self.instructions,
            "",
            "TOOLS: to delegate a question, reply with ONLY",
            '{"tool": "<tool name>", "prompt": "<question for the tool>"}',
            "Available tools:",
        ]
        lines.extend(f"- {t.name}: {t.description}" for t in self.tools.values())
        return "\n".join(lines)

    def _tool_request(self, text: str) -> tuple[str, str] | None:
        candidate = extract_json(text)
        if candidate is None:
            return None
        try:
            data = json.loads(candidate)
        except json.JSONDecodeError:
            return None
        if not isinstance(data, dict):
            return None
        tool_name = data.get("tool")
        if not isinstance(tool_name, str) or tool_name not in self.tools:
            return None
        return tool_name, str(data.get("prompt", ""))

    def as_tool(self, description: str, name: str | None = None) -> AgentTool:
        return AgentTool(name=name or self.name, description=description, agent=self)

    def set_turn_monitor(self, monitor: TurnMonitor | None) -> None:
        """Install a monitor on this agent and, recursively, its sub-agents."""
        self.turn_monitor = monitor
        for sub in self._sub_agents:
            sub.set_turn_monitor(monitor)
