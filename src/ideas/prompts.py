"""LLM prompts for content idea generation."""

from __future__ import annotations

from seo_agent.context.models import ContextSnapshot
from seo_agent.context.render import bullet_list, render_context

IDEAS_SYSTEM_PROMPT = "You are an SEO content strategist. Always respond with valid JSON only."

_CATEGORY_INSTRUCTIONS: dict[str, str] = {
    "PAIN": """Generate article ideas that address customer pain points:
- How-to guides solving a specific problem
- Problem-focused explainers ("Why X happens and what to do")
- Comparisons of the traditional approach against a modern solution
- Templates and frameworks for assessing the problem
Tie each idea to at least one of the customer pains below.""",
    "GOAL": """Generate article ideas that help customers achieve their goals:
- Step-by-step guides toward a goal
- Planning frameworks and checklists
- Case studies of goal achievement
Each idea should serve at least one of the customer goals below.""",
    "TRIGGER": """Generate article ideas about buyer triggers and decision moments:
- When is the right time to act
- Signs that the reader is ready to switch
- Decision frameworks and timing checklists
Each idea should relate to at least one trigger below.""",
    "BENEFIT": """Generate commercial landing page ideas focused on benefits and outcomes:
- Outcome-driven pages tied to the value proposition
- Before/after and ROI narratives
Highlight specific gains and connect them to the value proposition.""",
    "FEATURE": """Generate commercial landing page ideas that showcase product features:
- Feature deep-dives explaining how it works and why it matters
- Use-case pages per feature
Use the solutions from the lean canvas as the feature list.""",
    "FAQ": """Generate FAQ article ideas that answer common objections and questions:
- Direct answers to buyer objections
- Pricing, security and switching-cost questions
Each idea should answer one concrete concern.""",
    "INFO": """Generate informational and educational article ideas:
- Industry insights and best practices
- Glossary and explainer articles
Tailor them to the persona at different stages of their journey.""",
}

_GENERIC_INSTRUCTIONS = "Create helpful content ideas grounded in the context below."


def _focus_block(context: ContextSnapshot, category: str) -> str:
    profile = context.customer_profile
    canvas = context.business_model
    if category == "PAIN":
        return "CUSTOMER PAINS:\n" + bullet_list(profile.pains if profile else (), "none captured")
    if category == "GOAL":
        return "CUSTOMER GOALS:\n" + bullet_list(profile.goals if profile else (), "none captured")
    if category == "TRIGGER":
        return "BUYER TRIGGERS:\n" + bullet_list(
            profile.triggers if profile else (), "none captured"
        )
    if category == "BENEFIT":
        return "CUSTOMER GAINS:\n" + bullet_list(profile.gains if profile else (), "none captured")
    if category == "FEATURE":
        return "PRODUCT FEATURES:\n" + bullet_list(
            canvas.solutions if canvas else (), "none captured"
        )
    if category == "FAQ":
        return "COMMON OBJECTIONS:\n" + bullet_list(
            profile.objections if profile else (), "none captured"
        )
    return ""


def build_idea_prompt(
    context: ContextSnapshot,
    category: str,
    count: int,
    language: str,
) -> str:
    """Build the user prompt asking for ``count`` ideas in one category."""
    key = category.upper()
    instructions = _CATEGORY_INSTRUCTIONS.get(key, _GENERIC_INSTRUCTIONS)
    focus = _focus_block(context, key)

    return f"""Generate {count} blog article ideas SPECIFICALLY tailored to the context below.
Do NOT generate generic ideas. Write in {language}.

{instructions}

{render_context(context)}

{focus}

OUTPUT (JSON only):
{{
  "ideas": [
    {{
      "title": "Article title (under 90 characters, specific to the context)",
      "summary": "Brief description (under 280 characters)",
      "searchVolume": 0,
      "difficulty": 0,
      "opportunityScore": 0,
      "intent": "informational | commercial | transactional | navigational",
      "clusterTitle": "Matching keyword cluster title, or null"
    }}
  ]
}}

REQUIREMENTS:
- Return exactly {count} ideas
- Every title must be unique
- Return ONLY the JSON object, no other text"""
