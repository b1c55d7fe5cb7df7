from __future__ import annotations

import re

POWER_VERBS: dict[str, tuple[str, ...]] = {
    "development": (
        "Engineered", "Architected", "Developed", "Built", "Implemented",
        "Designed", "Created", "Constructed", "Programmed", "Coded",
    ),
    "leadership": (
        "Spearheaded", "Led", "Directed", "Orchestrated", "Championed",
        "Drove", "Pioneered", "Initiated", "Headed", "Guided",
    ),
    "improvement": (
        "Optimized", "Enhanced", "Streamlined", "Accelerated", "Transformed",
        "Revamped", "Modernized", "Upgraded", "Refined", "Boosted",
    ),
    "analysis": (
        "Analyzed", "Evaluated", "Assessed", "Investigated", "Diagnosed",
        "Identified", "Researched", "Examined", "Audited", "Reviewed",
    ),
    "collaboration": (
        "Collaborated", "Partnered", "Coordinated", "Facilitated", "Liaised",
        "Integrated", "Unified", "Aligned",
    ),
    "delivery": (
        "Delivered", "Launched", "Deployed", "Released", "Shipped",
        "Executed", "Completed", "Achieved", "Accomplished", "Finalized",
    ),
    "management": (
        "Managed", "Oversaw", "Supervised", "Administered", "Governed", "Maintained",
    ),
    "innovation": (
        "Innovated", "Invented", "Conceptualized", "Devised", "Formulated",
        "Established", "Founded", "Introduced",
    ),
}

# Weak openers and their strong past-tense replacement. Two-word keys catch "responsible for".
WEAK_VERB_MAP: dict[str, str] = {
    "worked": "Developed",
    "work": "Developed",
    "working": "Developed",
    "helped": "Collaborated",
    "help": "Collaborated",
    "helping": "Collaborated",
    "assisted": "Supported",
    "assist": "Supported",
    "assisting": "Supported",
    "responsible for": "Managed",
    "responsible": "Managed",
    "duties": "Executed",
    "did": "Completed",
    "made": "Created",
    "make": "Created",
    "making": "Created",
    "got": "Achieved",
    "used": "Leveraged",
    "use": "Leveraged",
    "using": "Leveraged",
    "had": "Maintained",
    "involved in": "Contributed to",
    "involved": "Contributed",
    "participated": "Engaged",
    "participate": "Engaged",
    "handled": "Managed",
    "handle": "Managed",
    "handling": "Managed",
    "dealt": "Resolved",
    "wrote": "Authored",
    "write": "Authored",
    "writing": "Authored",
    "ran": "Executed",
    "run": "Executed",
    "set": "Established",
    "put": "Implemented",
    "took": "Assumed",
    "gave": "Provided",
    "saw": "Identified",
    "tried": "Attempted",
    "learned": "Mastered",
    "started": "Initiated",
    "looked": "Examined",
    "found": "Discovered",
}

_VERB_SYNONYMS: dict[str, tuple[str, ...]] = {
    "developed": ("built", "created", "engineered", "designed", "implemented", "constructed"),
    "built": ("developed", "created", "constructed", "assembled", "established"),
    "created": ("designed", "developed", "built", "produced", "generated"),
    "implemented": ("deployed", "executed", "established", "integrated", "introduced"),
    "improved": ("enhanced", "optimized", "boosted", "elevated", "refined", "streamlined"),
    "managed": ("led", "directed", "oversaw", "coordinated", "supervised", "administered"),
    "led": ("spearheaded", "headed", "directed", "guided", "championed"),
    "analyzed": ("evaluated", "assessed", "examined", "investigated", "reviewed"),
    "collaborated": ("partnered", "teamed", "cooperated", "coordinated"),
    "optimized": ("enhanced", "improved", "streamlined", "refined"),
    "automated": ("streamlined", "systematized", "digitized"),
    "delivered": ("shipped", "launched", "released", "completed", "executed"),
    "designed": ("architected", "crafted", "devised", "formulated", "planned"),
    "reduced": ("decreased", "minimized", "cut", "lowered"),
    "increased": ("boosted", "elevated", "raised", "expanded", "grew"),
    "supported": ("enabled", "maintained", "sustained"),
    "leveraged": ("applied", "employed", "harnessed"),
    "authored": ("documented", "drafted", "composed"),
}

_EXTRA_ACTION_VERBS = (
    "exceeded", "surpassed", "attained", "automated", "reduced", "increased", "generated",
    "produced", "tested", "supported", "resolved", "fixed", "debugged", "trained", "mentored",
    "coached", "taught", "presented", "communicated", "documented", "reported", "gained",
    "acquired", "explored", "contributed", "engaged", "authored", "leveraged",
    "assumed", "provided", "attempted", "mastered", "discovered", "assembled",
    "elevated", "raised", "expanded", "grew", "decreased", "minimized", "cut", "lowered",
    "crafted", "planned", "teamed", "cooperated", "systematized", "digitized", "enabled",
    "sustained", "applied", "employed", "harnessed", "drafted", "migrated", "refactored",
    "scaled", "secured", "containerized", "configured", "monitored", "composed",
)

STRONG_VERBS: frozenset[str] = frozenset(
    {verb.lower() for verbs in POWER_VERBS.values() for verb in verbs}
    | set(_EXTRA_ACTION_VERBS)
    | {syn for synonyms in _VERB_SYNONYMS.values() for syn in synonyms}
    | {target.split(" ", 1)[0].lower() for target in WEAK_VERB_MAP.values()}
) - {key for key in WEAK_VERB_MAP if " " not in key}


def synonyms_for(verb: str) -> tuple[str, ...]:
    """Explicit synonyms first, then the verb's siblings in its power-verb category."""
    lowered = verb.lower()
    ordered: list[str] = list(_VERB_SYNONYMS.get(lowered, ()))
    for verbs in POWER_VERBS.values():
        siblings = [item.lower() for item in verbs]
        if lowered in siblings:
            ordered.extend(siblings)
    seen: set[str] = {lowered}
    result: list[str] = []
    for candidate in ordered:
        if candidate not in seen:
            seen.add(candidate)
            result.append(candidate)
    return tuple(result)


_CATEGORY_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("development", re.compile(r"develop|build|creat|implement|design|architect|code|program", re.IGNORECASE)),
    ("leadership", re.compile(r"lead|team|mentor|manag|coordinat|direct", re.IGNORECASE)),
    ("improvement", re.compile(r"optimi|improv|enhanc|perform|speed|fast|reduc", re.IGNORECASE)),
    ("analysis", re.compile(r"analy|evaluat|assess|investigat|diagnos|identif|research", re.IGNORECASE)),
    ("collaboration", re.compile(r"collaborat|partner|coordinat|facilitat|work.*with", re.IGNORECASE)),
)

_QUANT_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("development", re.compile(r"develop|build|creat|implement|design|architect", re.IGNORECASE)),
    ("performance", re.compile(r"optimi|improv|enhanc|perform|speed|fast", re.IGNORECASE)),
    ("team", re.compile(r"lead|team|mentor|manag|coordinat", re.IGNORECASE)),
    ("cost", re.compile(r"cost|sav|budget|reduc|efficien", re.IGNORECASE)),
    ("users", re.compile(r"user|customer|client|engag|satisf", re.IGNORECASE)),
)

QUANTIFICATION_TEMPLATES: dict[str, tuple[str, ...]] = {
    "development": (
        "reducing development time by 30%",
        "improving code quality by 25%",
        "achieving 99.9% uptime",
        "with 95% test coverage",
        "reducing bugs by 40%",
    ),
    "performance": (
        "improving performance by 40%",
        "reducing load time by 50%",
        "handling 10K+ requests per day",
        "reducing latency by 60%",
        "optimizing response time by 45%",
    ),
    "team": (
        "leading a team of 5+ engineers",
        "mentoring 3+ developers",
        "coordinating across 4+ teams",
        "managing 8+ stakeholders",
        "supporting 20+ engineers",
    ),
    "cost": (
        "reducing costs by $50K annually",
        "saving 20+ hours weekly",
        "cutting infrastructure costs by 35%",
        "optimizing budget by 25%",
        "reducing operational expenses by 30%",
    ),
    "users": (
        "serving 100K+ users",
        "increasing user engagement by 45%",
        "achieving 95% customer satisfaction",
        "supporting 50K+ users daily",
        "growing user base by 200%",
    ),
    "delivery": (
        "delivering 2 weeks ahead of schedule",
        "completing 15+ sprints",
        "releasing 10+ features quarterly",
        "cutting production incidents by 50%",
        "shipping 5+ releases",
    ),
}

# Technology-free padding bullets. Every line already carries a metric.
FALLBACK_BULLETS: dict[str, tuple[str, ...]] = {
    "data": (
        "Analyzed datasets of 1M+ records to surface trends for business reviews",
        "Automated recurring reports, saving 10+ hours per week for the analytics team",
        "Improved data quality checks, reducing reporting errors by 35%",
        "Built 5+ dashboards adopted by 3 teams for weekly leadership reviews",
    ),
    "frontend": (
        "Built reusable interface components, cutting page development time by 30%",
        "Improved page load performance by 40% through asset and rendering optimizations",
        "Delivered responsive layouts for 50K+ users monthly across devices",
        "Raised accessibility compliance to 95% across core user journeys",
    ),
    "backend": (
        "Designed service endpoints handling 10K+ requests per day with 99.9% uptime",
        "Reduced average response latency by 45% through query and caching improvements",
        "Automated deployment steps, cutting release time by 50%",
        "Improved service reliability, reducing production incidents by 30%",
    ),
    "fullstack": (
        "Delivered end-to-end features across client and server layers for 20K+ users",
        "Reduced feature lead time by 35% by streamlining the release workflow",
        "Improved application performance by 40% across critical user flows",
        "Built internal tooling that saved the team 15+ hours per sprint",
    ),
    "intern": (
        "Contributed 10+ features to production code under senior engineer guidance",
        "Authored automated tests raising module coverage to 85%",
        "Resolved defects across 5+ modules during the internship period",
        "Documented onboarding steps, cutting ramp-up time for new members by 30%",
    ),
    "generic": (
        "Delivered 5+ projects on schedule in partnership with stakeholders across functions",
        "Improved team processes, increasing delivery efficiency by 25%",
        "Resolved 30+ escalated issues, raising stakeholder satisfaction by 20%",
        "Collaborated with 4+ teams to ship features for 10K+ users",
    ),
}

_ROLE_BANK_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("intern", re.compile(r"\b(intern|internship|trainee|apprentice)\b", re.IGNORECASE)),
    ("data", re.compile(r"\b(data|analyst|analytics|machine learning|ml|ai|scientist)\b", re.IGNORECASE)),
    ("fullstack", re.compile(r"\b(full[\s-]?stack)\b", re.IGNORECASE)),
    ("frontend", re.compile(r"\b(front[\s-]?end|ui|ux|react|angular|vue|web designer)\b", re.IGNORECASE)),
    ("backend", re.compile(r"\b(back[\s-]?end|api|server|platform|devops|cloud|infrastructure|sre)\b", re.IGNORECASE)),
)


def bullet_category(text: str) -> str:
    for category, pattern in _CATEGORY_PATTERNS:
        if pattern.search(text):
            return category
    return "delivery"


def quantification_category(text: str) -> str:
    for category, pattern in _QUANT_PATTERNS:
        if pattern.search(text):
            return category
    return "delivery"


def fallback_bank(*role_hints: str) -> tuple[str, ...]:
    joined = " ".join(hint for hint in role_hints if hint)
    for bank, pattern in _ROLE_BANK_PATTERNS:
        if pattern.search(joined):
            return FALLBACK_BULLETS[bank]
    return FALLBACK_BULLETS["generic"]
