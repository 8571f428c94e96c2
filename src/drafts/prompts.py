"""LLM prompts for draft generation and in-place refinement."""

from __future__ import annotations

from seo_agent.context.models import ContextSnapshot
from seo_agent.context.render import render_context
from seo_agent.drafts.models import ContentType
from seo_agent.drafts.templates import TemplateType
from seo_agent.ideas.models import BacklogIdea

DRAFT_SYSTEM_PROMPT = "You are a senior content strategist. Always respond with valid JSON only."

REFINE_SYSTEM_PROMPT = (
    "You are an expert editor. You EDIT existing content IN PLACE: keep the structure, "
    "keep every section and heading, and apply only the requested changes. "
    "Always respond with valid JSON only."
)

DEFAULT_CONTENT_GOAL = "Define and formulate the main business goal of the article based on context and idea."
DEFAULT_FUNNEL_STAGE = (
    "Solution-aware / BOFU, reader knows the problem and is considering specific solutions"
)
DEFAULT_SPECIAL_REQUIREMENTS = "No additional requirements."
DEFAULT_CTA_TEXT = "Learn more"

_TEMPLATE_INSTRUCTIONS: dict[TemplateType, str] = {
    TemplateType.ONBOARDING: (
        "Write a getting-started walkthrough: prerequisites, numbered first steps, "
        "the first quick win, and what to explore next."
    ),
    TemplateType.TRIGGER: (
        "Open with the moment that makes the reader act. Describe the signals, the cost "
        "of waiting, and a concrete decision checklist."
    ),
    TemplateType.PAIN_POINT: (
        "Name the pain precisely, explain why it happens, show its cost, then present "
        "practical ways out with the product as one of them."
    ),
    TemplateType.FEATURE: (
        "Explain what the feature does, how it works step by step, which job it helps "
        "with, and show one realistic usage scenario."
    ),
    TemplateType.FAQ: (
        "Structure the article as questions and direct answers. Every heading is a "
        "question the persona actually asks."
    ),
    TemplateType.SOLUTION: (
        "Present the solution: the problem it solves, how it works, who it is for, "
        "and how to get started."
    ),
    TemplateType.BENEFIT: (
        "Lead with outcomes. Quantify gains where possible and tie each benefit to the "
        "unique value proposition."
    ),
    TemplateType.TUTORIAL: (
        "Write a hands-on tutorial with numbered steps, expected results per step, and "
        "common mistakes."
    ),
    TemplateType.COMPARISON: (
        "Compare the options on explicit criteria, include a summary table in HTML, and "
        "end with a recommendation per use case."
    ),
    TemplateType.CASE_STUDY: (
        "Tell a case study: context, challenge, approach, measurable results, lessons."
    ),
    TemplateType.INFO: (
        "Write an educational explainer with definitions, examples and best practices."
    ),
    TemplateType.GENERAL: "Write a well-structured, helpful article on the idea.",
}

_OUTPUT_FORMAT = """OUTPUT FORMAT (return JSON only):
{
  "title": "Title 50-70 characters with a question, power word or number plus SEO keywords",
  "summary": "Lead paragraph under 280 characters",
  "outline": [
    {
      "heading": "H2 heading",
      "body": "Section body in HTML: <p>, <ul>/<ol> with <li>, <strong>, <h3> (NO <h2> inside body)",
      "notes": "Editor notes"
    }
  ],
  "seo": {
    "keywords": ["Keyword 1", "Keyword 2"],
    "metaDescription": "Meta description under 160 characters",
    "slug_hint": "Slug suggestion"
  }
}"""


_PAGE_TYPES = (
    "feature",
    "service",
    "solution",
    "product",
    "use_case",
    "industry",
    "persona",
    "pricing",
    "integration",
    "template",
    "comparison",
    "overview",
)

_PAGE_INSTRUCTIONS = """This is a commercial website page, not a blog article.
Before writing, classify which page type fits best ({page_types}):
- A specific capability: feature
- Process and deliverables: service
- Persona plus a job to be done: solution
- Broad product or platform description: product
- Industry keywords: industry
- Words like "pricing" or "plans": pricing
- Tool names or "integration": integration
- Words like "compare" or "vs": comparison
- Otherwise: overview
Follow the section order of that page type. The outline must start with a hero
section (headline plus a call to action) and a value proposition section, then
pains and promise, solution overview, social proof, and a FAQ covering cost,
effort, timeline and risk. End with a second, distinct call to action.
Every listed feature, step or benefit gets a 1-2 sentence explanation of its
impact. Keep the tone confident and consultative.

KEYWORD FOCUS:
{keyword_focus}
Use the cluster title in the hero headline and the value proposition, and work
the main keywords into at least two more sections without keyword stuffing."""

_ARTICLE_TITLE_REQUIREMENTS = """TITLE REQUIREMENTS:
- 50-70 characters, 5-9 words
- Include a question, a power word or a number
- Include SEO keywords from the idea"""

_PAGE_TITLE_REQUIREMENTS = """TITLE REQUIREMENTS:
- Page headline under 90 characters
- State the outcome for the persona, not a question
- Include the main cluster keyword"""


def _keyword_focus(context: ContextSnapshot, idea: BacklogIdea) -> str:
    clusters = [c for c in context.clusters if c.id == idea.cluster_id] or list(context.clusters)
    if not clusters:
        return f"- No keyword clusters captured; derive the topic from the idea: {idea.title}"
    return "\n".join(
        f"- {c.title} ({c.intent}): {', '.join(c.keywords) or 'no keywords'}" for c in clusters
    )


def _instructions(
    context: ContextSnapshot, idea: BacklogIdea, content_type: ContentType, template: TemplateType
) -> str:
    if not content_type.is_page:
        return _TEMPLATE_INSTRUCTIONS[template]
    return _PAGE_INSTRUCTIONS.format(
        page_types=", ".join(_PAGE_TYPES), keyword_focus=_keyword_focus(context, idea)
    )


def build_draft_prompt(
    context: ContextSnapshot,
    idea: BacklogIdea,
    content_type: ContentType,
    template: TemplateType,
    language: str,
    content_goal: str | None = None,
    funnel_stage: str | None = None,
    special_requirements: str | None = None,
) -> str:
    """Build the user prompt for a full draft."""
    goal = (content_goal or "").strip() or DEFAULT_CONTENT_GOAL
    stage = (funnel_stage or "").strip() or DEFAULT_FUNNEL_STAGE
    requirements = (special_requirements or "").strip() or DEFAULT_SPECIAL_REQUIREMENTS

    return f"""###
CONTENT SETTINGS
- Content type: {content_type}
- Detected template type: {template}
- Language: {language}
- Funnel stage: {stage}
- Content goal / KPI: {goal}
- Idea category: {idea.category}
- Additional requirements: {requirements}

###
{render_context(context)}

###
BACKLOG IDEA
- Title: {idea.title}
- Description: {idea.description}

###
{_PAGE_TITLE_REQUIREMENTS if content_type.is_page else _ARTICLE_TITLE_REQUIREMENTS}

###
TEMPLATE INSTRUCTIONS
{_instructions(context, idea, content_type, template)}

Write everything in {language}.

###
{_OUTPUT_FORMAT}"""


def build_refine_prompt(
    body: str,
    summary: str,
    instructions: str,
    language: str,
    cta_url: str | None = None,
    cta_text: str | None = None,
) -> str:
    """Build the user prompt for editing a draft in place."""
    if cta_url:
        cta_block = (
            f'Add a link to {cta_url} with text "{cta_text or DEFAULT_CTA_TEXT}" inserted '
            "naturally into the conclusion (do NOT add a separate CTA heading)."
        )
    else:
        cta_block = (
            "Leave existing calls to action untouched unless the instructions explicitly "
            "ask to change them."
        )

    return f"""Edit the draft below according to the instructions.

INSTRUCTIONS:
{instructions.strip() or "Improve clarity and flow without changing meaning."}

CALL TO ACTION:
{cta_block}

CRITICAL RULES:
- Preserve every existing <h2> heading (same order and count)
- Do not delete sections; edit the text inside them
- Keep the length comparable to the original
- Keep the HTML formatting
- Write in {language}

CURRENT SUMMARY:
{summary or "(none)"}

CURRENT BODY:
{body}

OUTPUT (JSON only):
{{"body": "The full edited HTML body", "summary": "Updated summary, or omit if unchanged"}}"""
