"""SEO content pipeline: context assembly, LLM ideation and drafting, CMS publishing."""

__version__ = "0.1.0"
