"""Flow map of default and conditional paths, for debugging and diagrams"""
from typing import Any, Dict, List, Sequence

from jinja2 import Environment, PackageLoader

from ..models.flow import Flow
from ..models.question import Question

END_MARKER = "END"


def build_flow_map(questions: Sequence[Question]) -> Dict[str, Dict[str, Any]]:
    """Map each question to its fallthrough target and conditional paths
    
    Returns:
        Dictionary keyed by question id with index, title, type, next_default
        and conditional_paths
    """
    flow_map: Dict[str, Dict[str, Any]] = {}
    for index, question in enumerate(questions):
        next_default = questions[index + 1].id if index + 1 < len(questions) else END_MARKER
        paths: List[Dict[str, Any]] = []
        for rule in question.conditional_logic:
            if rule.target:
                paths.append({
                    "condition": rule.condition.model_dump(),
                    "target": rule.target,
                    "action": rule.action,
                })
        flow_map[question.id] = {
            "index": index,
            "title": question.title,
            "type": question.type.value,
            "next_default": next_default,
            "conditional_paths": paths,
        }
    return flow_map


def _mermaid_id(raw: str) -> str:
    return "n_" + "".join(ch if ch.isalnum() else "_" for ch in raw)


def _mermaid_text(raw: Any) -> str:
    return str(raw).replace('"', "'")


def render_mermaid(flow: Flow) -> str:
    """Render the flow map as a Mermaid flowchart"""
    env = Environment(
        loader=PackageLoader("formflow", "templates"),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.filters["mid"] = _mermaid_id
    env.filters["mtext"] = _mermaid_text
    template = env.get_template("flow_map.mmd.j2")
    return template.render(
        flow=flow,
        flow_map=build_flow_map(flow.questions),
        end_marker=END_MARKER,
    )
