"""Questionnaire XML import.

A questionnaire groups questions by theme::

    <root>
      <theme name="tecnologia">
        <question>
          <text>Qual é a linguagem de programação?</text>
          <option>Python</option>
          <option>Java</option>
          <correct>0</correct>
          <feedback-title>Correto!</feedback-title>
          <feedback-text>Python é uma linguagem versátil</feedback-text>
          <feedback-illustration>https://example.com/image.jpg</feedback-illustration>
        </question>
      </theme>
    </root>

``feedback-illustration`` and ``visibility`` are optional.
"""

import logging
import xml.etree.ElementTree as ET
from typing import List, Optional

from schemas.question import Feedback, QuestionRequest
from utils.question_manager import validate_question

logger = logging.getLogger(__name__)


def _text(element: ET.Element, tag: str) -> Optional[str]:
    child = element.find(tag)
    if child is None or child.text is None:
        return None
    return child.text.strip()


def _parse_question(element: ET.Element, theme: str, position: int) -> QuestionRequest:
    correct = _text(element, "correct")
    try:
        correct_index = int(correct)
    except (TypeError, ValueError):
        raise ValueError(f"Question {position}: <correct> must be an option index")

    req = QuestionRequest(
        theme=theme,
        question=_text(element, "text") or "",
        options=[(option.text or "").strip() for option in element.findall("option")],
        correct_option_index=correct_index,
        feedback=Feedback(
            title=_text(element, "feedback-title") or "",
            text=_text(element, "feedback-text") or "",
            illustration=_text(element, "feedback-illustration") or "",
        ),
        visibility=_text(element, "visibility"),
    )
    try:
        validate_question(req)
    except ValueError as exc:
        raise ValueError(f"Question {position}: {exc}")
    return req


def parse_questions_xml(content: bytes) -> List[QuestionRequest]:
    """Parse a questionnaire document into validated question requests.

    Args:
        content: Raw XML bytes.

    Returns:
        One QuestionRequest per ``<question>``, in document order.

    Raises:
        ValueError: If the document is malformed, has no questions, or any
            question is invalid. Questions are numbered from 1 in messages.
    """
    try:
        root = ET.fromstring(content)
    except ET.ParseError as exc:
        raise ValueError(f"Malformed XML: {exc}")

    requests = []
    position = 0
    for theme in root.iter("theme"):
        name = (theme.get("name") or "").strip()
        if not name:
            raise ValueError('Every <theme> needs a non-empty "name" attribute')
        for element in theme.findall("question"):
            position += 1
            requests.append(_parse_question(element, name, position))

    if not requests:
        raise ValueError("The file contains no questions")
    logger.debug("Parsed %d questions from XML", len(requests))
    return requests
