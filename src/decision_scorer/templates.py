"""Decision template library.

Pre-built decisions for common situations. Templates ship as YAML with
the package and can be extended with a user-supplied YAML file.
"""

import logging
from pathlib import Path
from typing import Optional

import yaml

from .schema import Criterion, Decision, DecisionTemplate, Option

logger = logging.getLogger(__name__)

BUILTIN_TEMPLATES_PATH = Path(__file__).parent / "data" / "templates.yaml"

_templates: Optional[list[DecisionTemplate]] = None


def load_templates(path: Path) -> list[DecisionTemplate]:
    """Load templates from a YAML file containing a list of templates."""
    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f)
    return [DecisionTemplate.model_validate(t) for t in data or []]


def get_all_templates() -> list[DecisionTemplate]:
    """Get all built-in templates."""
    global _templates
    if _templates is None:
        _templates = load_templates(BUILTIN_TEMPLATES_PATH)
        logger.debug("Loaded %d built-in templates", len(_templates))
    return list(_templates)


def get_template(template_id: str) -> Optional[DecisionTemplate]:
    """Get a template by ID."""
    return next((t for t in get_all_templates() if t.id == template_id), None)


def get_templates_by_category(category: str) -> list[DecisionTemplate]:
    """Get templates in a category, ignoring case."""
    wanted = category.strip().lower()
    return [t for t in get_all_templates() if t.category.lower() == wanted]


def get_categories() -> list[str]:
    """Get unique categories, in first-seen order."""
    return list(dict.fromkeys(t.category for t in get_all_templates()))


def template_to_decision(template: DecisionTemplate) -> Decision:
    """Build an unscored decision from a template."""
    return Decision(
        title=template.name,
        options=[
            Option(id=f"option-{i}", name=name)
            for i, name in enumerate(template.options, 1)
        ],
        criteria=[
            Criterion(id=f"criterion-{i}", name=c.name, weight=c.weight)
            for i, c in enumerate(template.criteria, 1)
        ],
    )


def apply_template(template_id: str) -> Optional[Decision]:
    """Start a new decision from a template, or None for an unknown ID."""
    template = get_template(template_id)
    if template is None:
        return None
    return template_to_decision(template)
