"""Terminal front end that plays the quiz one question at a time."""
from __future__ import annotations

from typing import Callable, Dict, List, Optional

from quiz_backend.client.quiz_session import QuizSession, QuizStatus
from quiz_backend.client.selector import OptionState, SelectorGroup, SelectorOption

_MARKS = {"correct": "✔", "incorrect": "✘"}


def build_selector(question: Dict, value=None, correct_value=None) -> SelectorGroup:
    return SelectorGroup(
        [SelectorOption(value=o["id"], label=o["text"]) for o in question["options"]],
        value=value,
        correct_value=correct_value,
    )


def render_question(question: Dict, states: List[OptionState]) -> str:
    lines = [question["stem"]]
    for number, s in enumerate(states, start=1):
        bullet = "(x)" if s.checked else "( )"
        mark = _MARKS.get(s.state, "")
        lines.append(f"  {number}. {bullet} {s.label} {mark}".rstrip())
    return "\n".join(lines)


async def play(
    session: QuizSession,
    *,
    input_func: Callable[[str], str] = input,
    output: Callable[[str], None] = print,
    max_rounds: Optional[int] = None,
) -> Dict[str, int]:
    """Returns a tally of answered, correct and wrong rounds."""
    tally = {"answered": 0, "correct": 0, "wrong": 0}
    await session.load_next()

    while max_rounds is None or tally["answered"] < max_rounds:
        if session.question is None:
            output(f"No question available: {session.error}" if session.error else "No questions available.")
            break

        question = session.question
        selector = build_selector(question)
        output(render_question(question, selector.option_states()))

        raw = input_func("Choose an option number (q to quit): ").strip().lower()
        if raw == "q":
            break
        if not raw.isdigit() or not 1 <= int(raw) <= len(selector.options):
            output("Please enter one of the listed numbers.")
            continue

        option_id = selector.options[int(raw) - 1].value
        result = await session.choose(option_id) or {}
        tally["answered"] += 1
        selector = build_selector(question, value=option_id, correct_value=result.get("correctOptionId"))
        output(render_question(question, selector.option_states()))

        if session.status is QuizStatus.CORRECT:
            tally["correct"] += 1
            output("Correct!")
            if max_rounds is not None and tally["answered"] >= max_rounds:
                break
            await session.wait_for_advance()
        else:
            tally["wrong"] += 1
            if session.error:
                output(f"Error: {session.error}")
            output("Wrong.")
            if result.get("explanation"):
                output(f"Explanation: {result['explanation']}")
            if max_rounds is not None and tally["answered"] >= max_rounds:
                break
            input_func("Press Enter for the next question...")
            await session.load_next()

    output(f"Answered {tally['answered']}: {tally['correct']} correct, {tally['wrong']} wrong.")
    return tally
