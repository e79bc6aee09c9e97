"""Terminal selection prompt."""

import sys
from typing import Callable, List, Optional, Sequence, TextIO


class PromptAbortedError(Exception):
    """The operator closed the prompt or gave no usable answer."""

    pass


class Prompter:
    """Pick one option from a list by number or by name.

    Options are listed ``page_size`` at a time. An empty answer shows the next
    page (or picks ``default`` when one is given); any text that is neither a
    number nor an exact option narrows the list to options containing it.
    """

    def __init__(
        self,
        input_fn: Optional[Callable[[str], str]] = None,
        output: Optional[TextIO] = None,
        page_size: int = 15,
        max_attempts: int = 5,
    ):
        self.input_fn = input_fn if input_fn is not None else input
        self.output = output if output is not None else sys.stderr
        self.page_size = page_size
        self.max_attempts = max_attempts

    def select(self, message: str, options: Sequence[str], default: Optional[str] = None) -> int:
        """Return the index in ``options`` of the chosen item.

        Raises:
            PromptAbortedError: On EOF, Ctrl-C, an empty option list or too many
                unusable answers
        """
        if not options:
            raise PromptAbortedError("Nothing to select from")

        candidates: List[int] = list(range(len(options)))
        offset = 0
        failed_attempts = 0
        suffix = f" [{default}]" if default else ""

        while failed_attempts < self.max_attempts:
            self._show(message, options, candidates, offset)

            try:
                answer = self.input_fn(f"{message}{suffix}: ").strip()
            except (EOFError, KeyboardInterrupt) as e:
                raise PromptAbortedError("Selection aborted") from e

            if not answer:
                if default in options:
                    return options.index(default)
                offset += self.page_size
                if offset >= len(candidates):
                    offset = 0
                continue

            if answer.isdigit():
                number = int(answer)
                if 1 <= number <= len(candidates):
                    return candidates[number - 1]
                print(f"No option numbered {number}", file=self.output)
                failed_attempts += 1
                continue

            if answer in options:
                return options.index(answer)

            narrowed = [i for i in candidates if answer.lower() in options[i].lower()]
            if len(narrowed) == 1:
                return narrowed[0]
            if narrowed:
                candidates = narrowed
                offset = 0
            else:
                print(f"No option matches {answer!r}", file=self.output)
                failed_attempts += 1

        raise PromptAbortedError("No option selected")

    def _show(self, message: str, options: Sequence[str], candidates: List[int], offset: int):
        page = candidates[offset:offset + self.page_size]
        print(f"? {message}", file=self.output)
        for number, index in enumerate(page, start=offset + 1):
            print(f"  {number:>3}) {options[index]}", file=self.output)
        if len(candidates) > len(page):
            print(f"  ... {len(candidates)} options, Enter for more", file=self.output)
