"""Unit tests for flow document loading"""

import json

import pytest

from formflow.exceptions import FlowDocumentError
from formflow.parsers import load_answers, load_flow, parse_flow


def test_load_json(tmp_path):
    path = tmp_path / "flow.json"
    path.write_text(json.dumps({"title": "Demo", "questions": [{"id": "q1", "type": "email"}]}))

    flow = load_flow(path)

    assert flow.title == "Demo"
    assert flow.questions[0].id == "q1"


def test_load_yaml(tmp_path):
    path = tmp_path / "flow.yaml"
    path.write_text(
        "title: Demo\n"
        "questions:\n"
        "  - id: q1\n"
        "    type: radio\n"
        "    options: [A, B]\n"
        "    conditional_logic:\n"
        "      - question: q1\n"
        "        operator: equals\n"
        "        value: A\n"
        "        thenGoTo: q2\n"
        "  - id: q2\n"
    )

    flow = load_flow(path)

    assert flow.questions[0].type.value == "single-choice"
    assert flow.questions[0].conditional_logic[0].target == "q2"


def test_bare_question_list():
    flow = parse_flow([{"id": "q1"}, {"id": "q2"}])

    assert [q.id for q in flow.questions] == ["q1", "q2"]


def test_invalid_json_reports_line(tmp_path):
    path = tmp_path / "flow.json"
    path.write_text('{\n  "title": "x",\n  "questions": [,]\n}')

    with pytest.raises(FlowDocumentError) as exc_info:
        load_flow(path)

    assert exc_info.value.line_number == 3


def test_invalid_yaml_reports_line(tmp_path):
    path = tmp_path / "flow.yaml"
    path.write_text("title: x\nquestions: [q1, q2\n")

    with pytest.raises(FlowDocumentError) as exc_info:
        load_flow(path)

    assert exc_info.value.line_number is not None


def test_wrong_shape():
    with pytest.raises(FlowDocumentError) as exc_info:
        parse_flow({"questions": [{"title": "no id"}]})

    assert "questions.0.id" in exc_info.value.message


def test_scalar_document():
    with pytest.raises(FlowDocumentError):
        parse_flow("just text")


def test_missing_file(tmp_path):
    with pytest.raises(FlowDocumentError):
        load_flow(tmp_path / "nope.json")


def test_load_answers(tmp_path):
    path = tmp_path / "answers.yaml"
    path.write_text("q1: Enterprise\n2: [A, B]\n")

    assert load_answers(path) == {"q1": "Enterprise", "2": ["A", "B"]}


def test_answers_must_be_a_mapping(tmp_path):
    path = tmp_path / "answers.json"
    path.write_text("[1, 2]")

    with pytest.raises(FlowDocumentError):
        load_answers(path)
