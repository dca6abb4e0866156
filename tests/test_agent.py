"""Tests for Agent, AgentTool and the shared TurnMonitor."""

import asyncio
import threading

import pytest

from fieldwise.core.agent import Agent, TurnMonitor
from fieldwise.types import TurnBudgetExceededError

from conftest import MockLLMProvider


class TestTurnMonitor:
    def test_exactly_budget_succeeds(self):
        monitor = TurnMonitor(max_turns=3)
        for _ in range(3):
            monitor.check_and_increment()
        assert monitor.current_turn == 3

    def test_one_past_budget_fails(self):
        monitor = TurnMonitor(max_turns=3)
        for _ in range(3):
            monitor.check_and_increment()
        with pytest.raises(TurnBudgetExceededError) as exc_info:
            monitor.check_and_increment()
        assert exc_info.value.max_turns == 3
        assert "information you have" in exc_info.value.recovery_hint

    def test_zero_budget(self):
        with pytest.raises(TurnBudgetExceededError):
            TurnMonitor(max_turns=0).check_and_increment()

    def test_negative_budget_rejected(self):
        with pytest.raises(ValueError):
            TurnMonitor(max_turns=-1)

    def test_threaded_increments_are_exclusive(self):
        monitor = TurnMonitor(max_turns=50)
        failures: list[Exception] = []
        lock = threading.Lock()

        def worker():
            for _ in range(10):
                try:
                    monitor.check_and_increment()
                except TurnBudgetExceededError as e:
                    with lock:
                        failures.append(e)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert monitor.current_turn == 80
        assert len(failures) == 30


class TestAgent:
    @pytest.mark.asyncio
    async def test_run_without_tools(self):
        llm = MockLLMProvider(response="hello")
        agent = Agent(name="a", instructions="Be brief.", llm_provider=llm)
        assert await agent.run("hi") == "hello"
        assert llm.calls[0]["system"] == "Be brief."
        assert llm.calls[0]["user"] == "hi"

    @pytest.mark.asyncio
    async def test_prompt_transformer(self):
        llm = MockLLMProvider(response="ok")
        agent = Agent(
            name="a", instructions="x", llm_provider=llm,
            prompt_transformer=lambda p: p.upper(),
        )
        await agent.run("field name")
        assert llm.calls[0]["user"] == "FIELD NAME"

    @pytest.mark.asyncio
    async def test_budget_exceeded_on_top_level_call(self):
        agent = Agent(name="a", instructions="x", llm_provider=MockLLMProvider(response="ok"))
        with pytest.raises(TurnBudgetExceededError):
            await agent.run("hi", max_turns=0)

    @pytest.mark.asyncio
    async def test_tool_call_round_trip(self):
        sub_llm = MockLLMProvider(response="Italy, France")
        sub = Agent(name="countries", instructions="List countries.", llm_provider=sub_llm)
        root_llm = MockLLMProvider(responses=[
            '{"tool": "countries", "prompt": "Which countries?"}',
            '{"strategy": "signature"}',
        ])
        root = Agent(
            name="root", instructions="Classify.", llm_provider=root_llm,
            tools=[sub.as_tool("Lists countries")],
        )

        result = await root.run("Select country", max_turns=3)

        assert result == '{"strategy": "signature"}'
        assert sub_llm.calls[0]["user"] == "Which countries?"
        assert "countries: Lists countries" in root_llm.calls[0]["system"]
        assert "Italy, France" in root_llm.calls[1]["user"]

    @pytest.mark.asyncio
    async def test_call_tree_with_exactly_budget_succeeds(self):
        # root turn (with its continuation) + helper turn = 2
        sub = Agent(name="helper", instructions="x", llm_provider=MockLLMProvider(response="fact"))
        root_llm = MockLLMProvider(responses=['{"tool": "helper", "prompt": "?"}', "final"])
        root = Agent(name="root", instructions="x", llm_provider=root_llm,
                     tools=[sub.as_tool("helps")])
        assert await root.run("go", max_turns=2) == "final"
        assert root.turn_monitor.current_turn == 2
        assert len(root_llm.calls) == 2

    @pytest.mark.asyncio
    async def test_turn_past_budget_is_reported_to_caller(self):
        sub_llm = MockLLMProvider(response="fact")
        sub = Agent(name="helper", instructions="x", llm_provider=sub_llm)
        root_llm = MockLLMProvider(responses=[
            '{"tool": "helper", "prompt": "first"}',
            '{"tool": "helper", "prompt": "second"}',
            "final",
        ])
        root = Agent(name="root", instructions="x", llm_provider=root_llm,
                     tools=[sub.as_tool("helps")])

        assert await root.run("go", max_turns=2) == "final"

        # third turn (second helper call) was refused before reaching the model
        assert [c["user"] for c in sub_llm.calls] == ["first"]
        assert root.turn_monitor.current_turn == 3
        assert "Error: Max turn budget of 2" in root_llm.calls[2]["user"]

    @pytest.mark.asyncio
    async def test_root_recovers_after_sub_agent_exceeds_budget(self):
        sub_llm = MockLLMProvider(response="fact")
        sub = Agent(name="helper", instructions="x", llm_provider=sub_llm)
        root_llm = MockLLMProvider(responses=[
            '{"tool": "helper", "prompt": "?"}',
            '{"strategy": "signature"}',
        ])
        root = Agent(name="root", instructions="x", llm_provider=root_llm,
                     tools=[sub.as_tool("helps")])

        result = await root.run("go", max_turns=1)

        assert result == '{"strategy": "signature"}'
        assert sub_llm.calls == []
        assert (
            "Suggestion: Please provide a response based on the information you have."
            in root_llm.calls[1]["user"]
        )

    @pytest.mark.asyncio
    async def test_agent_tool_formats_errors(self):
        sub = Agent(name="helper", instructions="x", llm_provider=MockLLMProvider(response="fact"))
        sub.set_turn_monitor(TurnMonitor(max_turns=0))
        text = await sub.as_tool("helps").call("?")
        assert text.startswith("Error: Max turn budget of 0")
        assert "\nSuggestion: Please provide a response based on the information you have." in text

    @pytest.mark.asyncio
    async def test_agent_tool_plain_error(self, transport_error):
        sub = Agent(name="helper", instructions="x",
                    llm_provider=MockLLMProvider(error=transport_error))
        text = await sub.as_tool("helps").call("?")
        assert text == "Error: HTTP 500: boom"

    @pytest.mark.asyncio
    async def test_monitor_propagates_recursively_and_resets(self):
        leaf = Agent(name="leaf", instructions="x", llm_provider=MockLLMProvider(response="ok"))
        mid = Agent(name="mid", instructions="x", llm_provider=MockLLMProvider(response="ok"),
                    tools=[leaf.as_tool("leaf")])
        root = Agent(name="root", instructions="x", llm_provider=MockLLMProvider(response="ok"),
                     tools=[mid.as_tool("mid")])

        await root.run("first", max_turns=5)
        first = root.turn_monitor
        assert mid.turn_monitor is first
        assert leaf.turn_monitor is first

        await root.run("second", max_turns=5)
        assert root.turn_monitor is not first
        assert leaf.turn_monitor is root.turn_monitor
        assert root.turn_monitor.current_turn == 1

        await root.run("unbounded")
        assert leaf.turn_monitor is None

    @pytest.mark.asyncio
    async def test_concurrent_siblings_share_budget(self):
        a = Agent(name="a", instructions="x", llm_provider=MockLLMProvider(response="a"))
        b = Agent(name="b", instructions="x", llm_provider=MockLLMProvider(response="b"))
        root = Agent(name="root", instructions="x", llm_provider=MockLLMProvider(response="r"),
                     tools=[a.as_tool("a"), b.as_tool("b")])
        root.set_turn_monitor(TurnMonitor(max_turns=5))

        results = await asyncio.gather(
            *(tool.call("?") for tool in [a.as_tool("a"), b.as_tool("b")] * 4)
        )

        errors = [r for r in results if r.startswith("Error:")]
        assert len(errors) == 3
        assert root.turn_monitor.current_turn == 8

    @pytest.mark.asyncio
    async def test_tool_loop_capped_without_budget(self):
        sub = Agent(name="helper", instructions="x", llm_provider=MockLLMProvider(response="fact"))
        root_llm = MockLLMProvider(response='{"tool": "helper", "prompt": "again"}')
        root = Agent(name="root", instructions="x", llm_provider=root_llm,
                     tools=[sub.as_tool("helps")])
        result = await root.run("go")
        assert '"tool"' in result
        # initial call + 5 continuation rounds
        assert len(root_llm.calls) == 6

    @pytest.mark.asyncio
    async def test_unknown_tool_request_is_final_answer(self):
        sub = Agent(name="helper", instructions="x", llm_provider=MockLLMProvider(response="fact"))
        root_llm = MockLLMProvider(response='{"tool": "nope", "prompt": "?"}')
        root = Agent(name="root", instructions="x", llm_provider=root_llm,
                     tools=[sub.as_tool("helps")])
        assert await root.run("go") == '{"tool": "nope", "prompt": "?"}'
        assert len(root_llm.calls) == 1

    @pytest.mark.asyncio
    async def test_tool_loop_capped_with_budget(self):
        sub = Agent(name="helper", instructions="x", llm_provider=MockLLMProvider(response="fact"))
        root_llm = MockLLMProvider(response='{"tool": "helper", "prompt": "again"}')
        root = Agent(name="root", instructions="x", llm_provider=root_llm,
                     tools=[sub.as_tool("helps")])
        await root.run("go", max_turns=100)
        assert len(root_llm.calls) == 6
        # one root turn + five helper turns
        assert root.turn_monitor.current_turn == 6
