import logging
import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from types import MappingProxyType

from .config import ensure_dir
from .errors import StorageError, TemplateNotFoundError
from .store import Collection, ContentStore

TEMPLATE_SUFFIX = ".md"
DEFAULT_TITLE = "New Entry"
PLACEHOLDER = re.compile(r"\{\{(\w+)\}\}")

# ---------------------------------------------------------------------
# BUILT-IN TEMPLATES
# ---------------------------------------------------------------------
_DAILY = """# Daily Journal - {{date}}

## Morning
**Mood:**
**Energy Level:** /10

**Today's Intentions:**
-
-
-

**Grateful for:**
-
-
-

## Evening
**Accomplishments:**
-
-
-

**Lessons Learned:**


**Tomorrow's Focus:**
-
-
-

**Rating:** /10

---
#journal #daily
"""

_MEETING = """# Meeting Notes - {{date}}

**Date:** {{datetime}}
**Attendees:**

## Agenda
1.
2.
3.

## Discussion


## Decisions Made
-
-

## Action Items
- [ ]
- [ ]
- [ ]

## Next Steps


---
#meeting #work
"""

_PROJECT = """# Project: {{title}}

**Start Date:** {{date}}
**Status:** Planning

## Overview


## Goals
1.
2.
3.

## Timeline
- **Week 1:**
- **Week 2:**
- **Week 3:**
- **Week 4:**

## Resources Needed
-
-

## Success Metrics


## Notes


---
#project #planning
"""

_WEEKLY = """# Weekly Review - Week of {{date}}

## Overview


## Wins
-
-
-

## Progress on Goals


## Challenges


## Lessons Learned


## Next Week's Focus
1.
2.
3.

---
#weekly-review #reflection
"""

_IDEA = """# Idea: {{title}}

**Date:** {{date}}

## The Idea


## Why This Matters


## Next Steps
- [ ]
- [ ]
- [ ]

## Resources


## Notes


---
#ideas #brainstorm
"""

_GRATEFUL = """# Gratitude - {{date}}

Today I'm grateful for:

1.
2.
3.

## Why?


## Reflection


---
#gratitude #reflection
"""

BUILTIN_TEMPLATES = MappingProxyType({
    "daily": _DAILY,
    "meeting": _MEETING,
    "project": _PROJECT,
    "weekly": _WEEKLY,
    "idea": _IDEA,
    "grateful": _GRATEFUL,
})

DESCRIPTIONS = MappingProxyType({
    "daily": "Daily journal with morning/evening sections",
    "meeting": "Meeting notes with agenda and action items",
    "project": "Project planning template",
    "weekly": "Weekly review and reflection",
    "idea": "Capture and develop ideas",
    "grateful": "Gratitude journal entry",
})


@dataclass(frozen=True)
class Template:
    name: str
    body: str
    description: str = ""
    builtin: bool = True


def default_variables(title: str = None, now: datetime = None) -> dict:
    now = now or datetime.now()
    return {
        "date": now.strftime("%Y-%m-%d"),
        "datetime": now.strftime("%Y-%m-%d %H:%M"),
        "time": now.strftime("%H:%M"),
        "title": title or DEFAULT_TITLE,
        "year": now.strftime("%Y"),
        "month": now.strftime("%B"),
        "day": now.strftime("%A"),
    }


def substitute(body: str, variables: dict) -> str:
    """Replace ``{{name}}`` tokens in one pass; unknown names stay as written."""
    def _replace(match):
        key = match.group(1)
        if key in variables:
            return str(variables[key])
        return match.group(0)
    return PLACEHOLDER.sub(_replace, body)


# ---------------------------------------------------------------------
# TEMPLATE ENGINE (built-ins first, then files in the templates directory)
# ---------------------------------------------------------------------
class TemplateEngine:
    def __init__(self, templates_dir: Path):
        self.templates_dir = Path(templates_dir)

    def _custom_path(self, name: str) -> Path:
        return self.templates_dir / f"{name}{TEMPLATE_SUFFIX}"

    def get(self, name: str) -> Template:
        if name in BUILTIN_TEMPLATES:
            return Template(name, BUILTIN_TEMPLATES[name], DESCRIPTIONS.get(name, ""))
        path = self._custom_path(name)
        try:
            body = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logging.debug(f"Template '{name}' not readable at {path}: {e}")
            raise TemplateNotFoundError(f"template '{name}' not found") from e
        return Template(name, body, "Custom template", builtin=False)

    def render(self, name: str, variables: dict = None) -> str:
        template = self.get(name)
        if variables is None:
            variables = default_variables()
        return substitute(template.body, variables)

    def custom_names(self) -> list:
        if not self.templates_dir.is_dir():
            return []
        try:
            return sorted(p.stem for p in self.templates_dir.glob(f"*{TEMPLATE_SUFFIX}")
                          if p.is_file() and p.stem not in BUILTIN_TEMPLATES)
        except OSError as e:
            logging.error(f"Error listing custom templates in {self.templates_dir}: {e}")
            return []

    def list_templates(self) -> list:
        templates = [Template(name, body, DESCRIPTIONS.get(name, ""))
                     for name, body in BUILTIN_TEMPLATES.items()]
        for name in self.custom_names():
            templates.append(Template(name, "", "Custom template", builtin=False))
        return templates

    def save_custom(self, name: str, body: str) -> Path:
        ensure_dir(self.templates_dir)
        path = self._custom_path(name)
        try:
            path.write_text(body, encoding="utf-8")
        except OSError as e:
            raise StorageError(f"could not save template {path}: {e}") from e
        logging.info(f"Saved custom template {path}")
        return path

    def apply(self, name: str, store: ContentStore, item_id: str, title: str,
              now: datetime = None) -> Path:
        content = self.render(name, default_variables(title, now))
        return store.write(Collection.NOTES, item_id, content)
