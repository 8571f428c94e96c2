"""Render a ContextSnapshot as plain-text prompt sections."""

from __future__ import annotations

from collections.abc import Sequence

from seo_agent.context.models import ContextSnapshot


def bullet_list(items: Sequence[str], placeholder: str) -> str:
    """Render items as ``- item`` lines, or the placeholder when empty."""
    if not items:
        return placeholder
    return "\n".join(f"- {item}" for item in items)


def render_project(snapshot: ContextSnapshot) -> str:
    project = snapshot.project
    hypothesis = snapshot.hypothesis
    return f"""PROJECT OVERVIEW:
- Title: {project.title}
- Description: {project.description or "No description"}

HYPOTHESIS:
- Title: {hypothesis.title}
- Description: {hypothesis.description or hypothesis.title}"""


def render_customer_profile(snapshot: ContextSnapshot) -> str:
    profile = snapshot.customer_profile
    if profile is None:
        return "ICP SNAPSHOT:\nNo customer profile captured."
    lines = [
        "ICP SNAPSHOT:",
        f"- Persona: {profile.persona or 'Not defined'}",
        "Pains:",
        bullet_list(profile.pains, "No pains captured."),
        "Goals:",
        bullet_list(profile.goals, "No goals captured."),
        "Triggers:",
        bullet_list(profile.triggers, "No triggers captured."),
    ]
    if profile.gains:
        lines += ["Gains:", bullet_list(profile.gains, "")]
    if profile.objections:
        lines += ["Objections:", bullet_list(profile.objections, "")]
    if profile.jtbd:
        lines.append(f"- Jobs to be done: {profile.jtbd}")
    if profile.customer_journey:
        lines.append(f"- Customer journey: {profile.customer_journey}")
    return "\n".join(lines)


def render_business_model(snapshot: ContextSnapshot) -> str:
    canvas = snapshot.business_model
    if canvas is None:
        return "LEAN CANVAS EXCERPT:\nNo lean canvas captured."
    return "\n".join(
        [
            "LEAN CANVAS EXCERPT:",
            f"- Unique value proposition: {canvas.unique_value_proposition or 'Not defined'}",
            "Problems:",
            bullet_list(canvas.problems, "No problems defined."),
            "Solutions:",
            bullet_list(canvas.solutions, "No solutions defined."),
            "Key metrics:",
            bullet_list(canvas.key_metrics, "No metrics defined."),
            "Channels:",
            bullet_list(canvas.channels, "No channels defined."),
        ]
    )


def render_clusters(snapshot: ContextSnapshot, limit: int = 5) -> str:
    if not snapshot.clusters:
        return "KEYWORD CLUSTERS:\nNo keyword clusters defined."
    lines = ["KEYWORD CLUSTERS:"]
    for cluster in snapshot.clusters[:limit]:
        keywords = ", ".join(cluster.keywords[:10]) or "no keywords"
        lines.append(f"- {cluster.title} ({cluster.intent}): {keywords}")
    return "\n".join(lines)


def render_context(snapshot: ContextSnapshot) -> str:
    """Full context block shared by idea and draft prompts."""
    return "\n\n".join(
        [
            render_project(snapshot),
            render_customer_profile(snapshot),
            render_business_model(snapshot),
            render_clusters(snapshot),
        ]
    )
