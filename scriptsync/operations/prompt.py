"""
Interactive prompt channel

A prompt is any callable ``(question, choices) -> Optional[str]`` that
returns one of *choices*, or None when the user dismissed the question.
The conflict engine only relies on that contract.
"""
from typing import Callable, Optional

Prompt = Callable[[str, list[str]], Optional[str]]


def console_prompt(question: str, choices: list[str]) -> Optional[str]:
    """
    Ask on the terminal.  Accepts the choice number or the choice text
    (case-insensitive).  Empty input, EOF and Ctrl-C dismiss the question.
    """
    print()
    print(f"  {question}")
    for idx, choice in enumerate(choices, start=1):
        print(f"    [{idx}] {choice}")

    while True:
        try:
            answer = input(f"  Your choice [1-{len(choices)}]: ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            return None

        if not answer:
            return None
        if answer.isdigit() and 1 <= int(answer) <= len(choices):
            return choices[int(answer) - 1]
        for choice in choices:
            if answer.lower() == choice.lower():
                return choice
        print(f"  Please enter a number between 1 and {len(choices)}.")
