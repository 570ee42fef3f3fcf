"""Unit tests for question list / workflow graph synchronization"""

import itertools

import pytest

from formflow.exceptions import FormFlowError, UnknownNodeError
from formflow.models import Ending, Flow, NodeKind, Question, START_NODE_ID
from formflow.sync import WorkflowSync, derive_graph, new_question
from formflow.validation import validate


def sequential_ids():
    counter = itertools.count(1)
    return lambda prefix: f"{prefix}-{next(counter)}"


@pytest.fixture
def flow():
    return Flow(
        id="f1",
        questions=[
            Question(id="q1", title="One"),
            Question(id="q2", title="Two", conditional_logic=[
                {"condition": {"field": "q2", "operator": "equals", "value": "x"}, "thenGoTo": "q3"},
            ]),
            Question(id="q3", title="Three"),
        ],
        endings=[Ending(id="end-1")],
    )


class TestDeriveGraph:
    """Test deriving the editor view from the question list"""

    def test_nodes_follow_model_order(self, flow):
        graph = derive_graph(flow)

        assert [n.id for n in graph.nodes] == [START_NODE_ID, "q1", "q2", "q3", "end-1"]
        assert [n.kind for n in graph.nodes] == [
            NodeKind.START, NodeKind.QUESTION, NodeKind.QUESTION, NodeKind.QUESTION, NodeKind.END,
        ]
        assert len(graph.start_nodes) == 1

    def test_grid_layout_for_unplaced_nodes(self, flow):
        graph = derive_graph(flow)

        positions = {n.id: (n.position.x, n.position.y) for n in graph.nodes}
        assert positions[START_NODE_ID] == (250, 50)
        assert positions["q1"] == (250, 200)
        assert positions["q2"] == (500, 200)
        assert positions["q3"] == (750, 200)
        assert positions["end-1"] == (250, 600)

    def test_rules_do_not_create_edges(self, flow):
        assert derive_graph(flow).edges == []

    def test_derive_is_idempotent(self, flow):
        WorkflowSync(flow).connect("q1", "q3")

        assert derive_graph(flow) == derive_graph(flow)

    def test_question_payload_carries_the_question(self, flow):
        node = derive_graph(flow).get_node("q1")

        assert node.payload["label"] == "One"
        assert node.payload["question"]["id"] == "q1"


class TestNodeGestures:
    def test_delete_node_removes_question_and_edges(self, flow):
        sync = WorkflowSync(flow)
        sync.connect("q1", "q3")
        sync.connect("q3", "end-1")

        sync.delete_node("q3")

        assert [q.id for q in flow.questions] == ["q1", "q2"]
        assert sync.graph.edges == []
        assert derive_graph(flow) == derive_graph(flow) == sync.graph

    def test_delete_leaves_dangling_rule_for_validator(self, flow):
        WorkflowSync(flow).delete_node("q3")

        report = validate(flow.questions, flow.endings)

        assert not report.valid
        assert report.errors[0].question_id == "q2"

    def test_start_node_cannot_be_deleted(self, flow):
        with pytest.raises(FormFlowError):
            WorkflowSync(flow).delete_node(START_NODE_ID)

    def test_delete_unknown_node(self, flow):
        with pytest.raises(UnknownNodeError):
            WorkflowSync(flow).delete_node("nope")

    def test_add_question_appends_without_source(self, flow):
        sync = WorkflowSync(flow, id_factory=sequential_ids())

        question = sync.add_question("single-choice")

        assert question.id == "q-1"
        assert flow.questions[-1] is question
        assert question.options == ["Option 1", "Option 2", "Option 3"]
        assert sync.graph.get_node("q-1").position.x == 250
        assert sync.graph.get_node("q-1").position.y == 350

    def test_add_question_from_source_inserts_after_it(self, flow):
        sync = WorkflowSync(flow, id_factory=sequential_ids())

        question = sync.add_question("short-text", source_node_id="q1")

        assert [q.id for q in flow.questions] == ["q1", "q-1", "q2", "q3"]
        node = sync.graph.get_node(question.id)
        assert (node.position.x, node.position.y) == (300, 380)
        assert [e.endpoints for e in sync.graph.edges] == [("q1", "q-1")]
        assert question.conditional_logic == []

    def test_add_question_from_start_goes_first(self, flow):
        sync = WorkflowSync(flow, id_factory=sequential_ids())

        sync.add_question("email", source_node_id=START_NODE_ID)

        assert flow.questions[0].id == "q-1"

    def test_add_question_from_end_node_is_rejected(self, flow):
        with pytest.raises(UnknownNodeError):
            WorkflowSync(flow).add_question("email", source_node_id="end-1")

    def test_generated_ids_skip_existing(self, flow):
        ids = iter(["q1", "q2", "q-new"])
        sync = WorkflowSync(flow, id_factory=lambda prefix: next(ids))

        assert sync.add_question().id == "q-new"

    def test_add_ending_from_preset(self, flow):
        sync = WorkflowSync(flow, id_factory=sequential_ids())

        ending = sync.add_ending("qualified")

        assert ending.mark_as_qualified is True
        assert ending.create_contact is True
        assert sync.graph.get_node(ending.id).position.x == 450

    def test_move_node_is_kept_by_later_derivations(self, flow):
        sync = WorkflowSync(flow)

        sync.move_node("q2", 10, 20)

        node = derive_graph(flow).get_node("q2")
        assert (node.position.x, node.position.y) == (10, 20)


class TestEdgeGestures:
    def test_connect_is_idempotent(self, flow):
        sync = WorkflowSync(flow)

        first = sync.connect("q1", "q3")
        second = sync.connect("q1", "q3")

        assert first.id == second.id == "e-q1-q3"
        assert len(sync.graph.edges) == 1

    def test_connect_rejects_edges_into_start(self, flow):
        with pytest.raises(UnknownNodeError):
            WorkflowSync(flow).connect("q1", START_NODE_ID)

    def test_connect_does_not_create_rules(self, flow):
        WorkflowSync(flow).connect("q1", "q3")

        assert flow.get_question("q1").conditional_logic == []

    def test_label_and_disconnect(self, flow):
        sync = WorkflowSync(flow)
        edge = sync.connect("q1", "q3")

        assert sync.label_edge(edge.id, "Enterprise").label == "Enterprise"
        sync.disconnect(edge.id)
        assert sync.graph.edges == []


class TestModelEdits:
    def test_update_question_in_place(self, flow):
        sync = WorkflowSync(flow)
        original = flow.get_question("q1")

        updated = sync.update_question("q1", title="Renamed", required=True)

        assert updated is original
        assert original.title == "Renamed"
        assert sync.graph.get_node("q1").payload["label"] == "Renamed"

    def test_question_id_is_immutable(self, flow):
        with pytest.raises(FormFlowError):
            WorkflowSync(flow).update_question("q1", id="q9")

    def test_set_rules_leaves_edges_alone(self, flow):
        sync = WorkflowSync(flow)

        sync.set_rules("q1", [{"question": "q1", "operator": "equals", "value": "a", "thenGoTo": "end-1"}])

        assert flow.get_question("q1").conditional_logic[0].target == "end-1"
        assert sync.graph.edges == []

    def test_move_question_reorders(self, flow):
        sync = WorkflowSync(flow)

        sync.move_question("q3", 0)

        assert [n.id for n in sync.graph.nodes][1:4] == ["q3", "q1", "q2"]


def test_new_question_defaults():
    question = new_question("q9", "long-text")

    assert question.title == "New long-text Question"
    assert question.options == []
    assert question.settings == {"placeholder": "Enter your answer"}
