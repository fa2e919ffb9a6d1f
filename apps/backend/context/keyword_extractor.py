"""
Keyword Extractor
=================

Turns a free-text task description into a structured TaskIntent: task type,
keywords, explicitly mentioned files and recognised framework/domain
concepts. Purely lexical.
"""

from __future__ import annotations

import re

from .constants import (
    ACTION_VERBS,
    DOMAIN_CONCEPTS,
    FRAMEWORK_CONCEPTS,
    SOURCE_ROOTS,
    STOP_WORDS,
    TASK_TYPE_KEYWORDS,
)
from .errors import ContextValidationError
from .models import TaskIntent, TaskType

MIN_KEYWORD_LENGTH = 4

_WORD_PATTERN = re.compile(r"\w+")

_FILE_MENTION_PATTERN = re.compile(
    r"(?<![\w/.-])((?:\./)?(?:" + "|".join(SOURCE_ROOTS) + r")/[\w\-./@\[\]]*\.[a-z0-9]+)\b"
)


class KeywordExtractor:
    """Extracts task intent from a task description."""

    def analyze(self, task: str) -> TaskIntent:
        """
        Analyze a task description.

        Args:
            task: Free-text task description

        Returns:
            TaskIntent derived from the text

        Raises:
            ContextValidationError: If the task is empty or whitespace only
        """
        if not task or not task.strip():
            raise ContextValidationError("Task description is required")

        text = task.lower()
        return TaskIntent(
            type=self.classify(text),
            keywords=tuple(self.extract_keywords(text)),
            mentioned_files=tuple(self.extract_mentioned_files(text)),
            framework_concepts=_present(FRAMEWORK_CONCEPTS, text),
            domain_concepts=_present(DOMAIN_CONCEPTS, text),
            action_verbs=_present(ACTION_VERBS, text),
        )

    def classify(self, text: str) -> TaskType:
        """Return the first task type whose keyword group matches."""
        for type_name, markers in TASK_TYPE_KEYWORDS.items():
            if any(marker in text for marker in markers):
                return TaskType(type_name)
        return TaskType.GENERAL

    def extract_keywords(self, text: str) -> list[str]:
        """Words of at least four characters, minus stop words, first occurrence order."""
        keywords: list[str] = []
        seen: set[str] = set()
        for word in _WORD_PATTERN.findall(text.lower()):
            if len(word) < MIN_KEYWORD_LENGTH or word in STOP_WORDS or word in seen:
                continue
            seen.add(word)
            keywords.append(word)
        return keywords

    def extract_mentioned_files(self, text: str) -> list[str]:
        files: list[str] = []
        for match in _FILE_MENTION_PATTERN.findall(text):
            path = match[2:] if match.startswith("./") else match
            if path not in files:
                files.append(path)
        return files


def _present(vocabulary: list[str], text: str) -> tuple[str, ...]:
    return tuple(term for term in vocabulary if term in text)
