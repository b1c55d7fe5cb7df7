from __future__ import annotations

import re
from collections.abc import Iterable

from ats_optimizer.normalize.utils import normalize_line

VALID_TECH_SKILLS = frozenset(
    {
        # languages
        "javascript", "typescript", "python", "java", "c++", "c#", "c", "go", "golang", "rust",
        "ruby", "php", "swift", "kotlin", "scala", "r", "matlab", "perl", "lua", "dart", "elixir",
        "clojure", "haskell", "sql", "plsql", "tsql", "nosql", "shell", "bash", "powershell",
        "groovy", "objective-c", "assembly", "cobol", "fortran", "vb.net", "visual basic", "f#",
        # frontend
        "react", "react.js", "reactjs", "angular", "angularjs", "vue", "vue.js", "vuejs", "svelte",
        "next.js", "nextjs", "nuxt", "nuxt.js", "gatsby", "remix", "astro", "solidjs", "preact",
        "alpine.js", "htmx", "ember", "ember.js", "backbone", "backbone.js", "jquery", "redux",
        "mobx", "zustand", "recoil", "jotai", "xstate", "rxjs", "html", "html5", "css", "css3",
        "sass", "scss", "less", "stylus", "tailwind", "tailwindcss", "bootstrap", "material-ui",
        "mui", "chakra-ui", "chakra", "styled-components", "emotion", "antd", "ant design", "bulma",
        # backend
        "node.js", "nodejs", "node", "express", "express.js", "expressjs", "nest.js", "nestjs",
        "fastify", "koa", "hapi", "django", "flask", "fastapi", "spring", "spring boot",
        "springboot", ".net", "dotnet", "asp.net", "rails", "ruby on rails", "laravel", "symfony",
        "codeigniter", "gin", "fiber", "actix", "phoenix", "ktor", "micronaut", "quarkus",
        "dropwizard", "play framework", "struts", "grails",
        # databases
        "mysql", "postgresql", "postgres", "mongodb", "redis", "elasticsearch", "dynamodb",
        "cassandra", "sqlite", "oracle", "mariadb", "couchdb", "couchbase", "neo4j", "firebase",
        "supabase", "prisma", "sequelize", "mongoose", "typeorm", "knex", "drizzle", "sqlalchemy",
        "hibernate", "jpa", "jdbc", "memcached", "influxdb", "timescaledb", "cockroachdb",
        "planetscale", "snowflake", "bigquery", "clickhouse",
        # cloud and devops
        "aws", "amazon web services", "azure", "microsoft azure", "gcp", "google cloud",
        "google cloud platform", "docker", "kubernetes", "k8s", "terraform", "ansible", "puppet",
        "chef", "jenkins", "ci/cd", "cicd", "github actions", "gitlab ci", "gitlab", "circleci",
        "travis ci", "argocd", "helm", "prometheus", "grafana", "datadog", "splunk", "elk",
        "logstash", "kibana", "nginx", "apache", "serverless", "lambda", "ec2", "s3", "rds",
        "cloudformation", "pulumi", "cloudflare", "vercel", "netlify", "heroku", "digitalocean",
        "vagrant", "packer", "consul", "istio", "envoy", "openshift",
        # collaboration tooling
        "git", "github", "bitbucket", "svn", "mercurial", "jira", "confluence", "azure devops",
        # design
        "figma", "sketch", "adobe xd", "photoshop", "illustrator",
        # api and integration
        "postman", "insomnia", "swagger", "openapi", "restful", "rest api", "graphql", "grpc",
        "websocket", "websockets", "soap", "api", "apis", "microservices", "oauth", "oauth2",
        "jwt", "json", "xml", "yaml", "protobuf",
        # testing
        "jest", "mocha", "chai", "cypress", "playwright", "selenium", "webdriver", "puppeteer",
        "testing library", "react testing library", "enzyme", "junit", "testng", "pytest",
        "unittest", "rspec", "jasmine", "karma", "vitest", "supertest", "storybook", "appium",
        "mockito", "sinon",
        # data and ml
        "machine learning", "deep learning", "artificial intelligence", "tensorflow", "pytorch",
        "keras", "scikit-learn", "sklearn", "pandas", "numpy", "scipy", "matplotlib", "seaborn",
        "plotly", "jupyter", "data science", "data analytics", "data analysis", "big data",
        "hadoop", "spark", "pyspark", "hive", "kafka", "airflow", "dbt", "tableau", "power bi",
        "powerbi", "looker", "nlp", "natural language processing", "computer vision", "opencv",
        "huggingface", "transformers", "bert", "llm", "langchain", "openai", "databricks",
        # mobile
        "react native", "flutter", "ionic", "xamarin", "swiftui", "jetpack compose", "android",
        "ios", "expo",
        # build tooling
        "webpack", "vite", "rollup", "parcel", "esbuild", "babel", "eslint", "prettier", "npm",
        "yarn", "pnpm", "maven", "gradle", "pip", "poetry", "conda", "cargo",
        # practices
        "agile", "scrum", "kanban", "devsecops", "sre", "continuous integration",
        "continuous deployment", "continuous delivery", "tdd", "bdd", "event-driven", "cqrs",
        # security
        "owasp", "penetration testing", "ssl", "tls", "iam", "rbac", "sso", "saml", "ldap",
        # platforms
        "linux", "unix", "ubuntu", "centos", "debian", "windows", "macos", "vim", "vscode",
        "intellij", "pycharm", "xcode",
        # cms, crm, web3, messaging
        "wordpress", "drupal", "shopify", "magento", "salesforce", "servicenow", "sap",
        "blockchain", "ethereum", "solidity", "web3", "rabbitmq", "activemq", "zeromq", "celery",
        "unity", "three.js", "webgl", "mqtt",
    }
)

INVALID_SKILL_WORDS = frozenset(
    {
        # verbs
        "improve", "participate", "write", "debug", "proficiency", "troubleshoot", "convert",
        "identify", "prepare", "leverage", "prioritize", "stay", "work", "working", "worked",
        "develop", "developing", "developed", "build", "building", "built", "create", "creating",
        "created", "implement", "implementing", "implemented", "manage", "managing", "managed",
        "deliver", "delivering", "delivered", "ensure", "ensuring", "provide", "providing",
        "support", "supporting", "supported", "maintain", "maintaining", "maintained",
        "collaborate", "collaborating", "analyze", "analyzing", "design", "designing", "designed",
        "test", "testing", "tested", "review", "reviewing", "contribute", "contributing",
        "learn", "learning", "understand", "understanding", "communicate", "present", "lead",
        "leading", "led", "coordinate", "assist", "help", "helping", "utilize", "apply",
        "execute", "drive", "driving", "achieve", "optimize", "optimizing", "enhance", "resolve",
        "perform", "establish", "define", "evaluate", "monitor", "monitoring", "track",
        "tracking", "report", "reporting", "document", "documenting", "train", "training",
        "mentor", "mentoring", "coach", "facilitate", "organize", "plan", "planning", "schedule",
        "research", "investigate", "diagnose", "fix", "fixing", "update", "upgrade", "migrate",
        "migrating", "deploy", "deploying", "launch", "release", "publish", "integrate",
        "integrating", "automate", "automating", "streamline", "scale", "scaling", "refactor",
        "refactoring",
        # locations
        "gurugram", "gurgaon", "bangalore", "bengaluru", "hyderabad", "chennai", "mumbai", "pune",
        "delhi", "noida", "kolkata", "ahmedabad", "jaipur", "lucknow", "chandigarh", "indore",
        "kochi", "india", "usa", "uk", "canada", "australia", "germany", "singapore", "dubai",
        "uae", "london", "berlin", "new york", "san francisco", "seattle", "austin", "toronto",
        "remote", "onsite", "on-site", "hybrid", "office", "wfh", "work from home",
        # spoken languages
        "english", "hindi", "spanish", "french", "german", "mandarin", "chinese", "japanese",
        "korean", "arabic", "portuguese", "russian", "italian", "dutch", "swedish", "polish",
        "turkish", "tamil", "telugu", "kannada", "malayalam", "marathi", "gujarati", "punjabi",
        "bengali", "urdu",
        # generic nouns
        "peer", "peers", "team", "teams", "company", "companies", "business", "client", "clients",
        "customer", "customers", "user", "users", "stakeholder", "stakeholders", "project",
        "projects", "product", "products", "service", "services", "solution", "solutions",
        "system", "systems", "process", "processes", "workflow", "workflows", "pipeline",
        "pipelines", "ability", "experience", "experienced", "knowledge", "expertise", "expert",
        "skills", "skill", "skilled", "proficient", "excellent", "good", "great", "strong",
        "solid", "proven", "basic", "advanced", "intermediate", "senior", "junior", "mid", "lead",
        "principal", "staff", "intern", "internship", "fresher", "entry", "level", "years",
        "year", "months", "time", "deadline", "deadlines", "requirement", "requirements",
        "feature", "features", "module", "modules", "component", "components", "interface",
        "platform", "platforms", "environment", "infrastructure", "architecture", "framework",
        "frameworks", "library", "libraries", "tool", "tools", "technology", "technologies",
        "software", "hardware", "application", "applications", "app", "apps", "website", "web",
        "mobile", "desktop", "frontend", "backend", "fullstack", "full-stack", "full stack",
        "devops", "data", "database", "cloud", "server", "servers", "network", "networks",
        # job titles
        "developer", "developers", "engineer", "engineers", "programmer", "architect",
        "manager", "analyst", "specialist", "consultant", "coordinator", "administrator",
        "admin", "officer", "executive", "director", "vp", "cto", "ceo", "head",
        # education
        "bachelor", "bachelors", "master", "masters", "phd", "degree", "diploma", "certificate",
        "certification", "certifications", "certified", "computer science", "information technology",
        "it", "engineering", "science", "graduate", "undergraduate", "mba", "btech", "bsc", "mtech",
        "msc", "be", "me", "bca", "mca", "college", "university", "school", "education", "cgpa", "gpa",
        # section headers and jd noise
        "responsibilities", "qualifications", "required", "preferred", "mandatory", "optional",
        "nice to have", "must have", "benefits", "perks", "overview", "description", "summary",
        "duties", "position", "role", "roles", "job", "jobs", "career", "opportunity", "apply",
        "location", "salary", "compensation", "ctc", "lpa", "about", "us", "we", "our", "join",
        "looking", "seeking", "hiring", "passionate", "motivated", "driven", "dedicated",
        # metrics and buzzwords
        "csat", "nps", "kpi", "kpis", "roi", "okr", "okrs", "sprint", "sprints", "velocity",
        "backlog", "ticket", "tickets", "issue", "issues", "bug", "bugs", "sla", "uptime",
        "availability", "reliability", "scalability", "performance", "efficiency",
        "productivity", "quality", "accuracy", "throughput", "latency",
        # filler
        "relevant", "related", "similar", "minimum", "maximum", "plus", "bonus", "other", "etc",
        "and", "or", "the", "a", "an", "is", "are", "was", "be", "have", "has", "will", "can",
        "secure", "scalable", "reliable", "robust", "efficient", "innovative", "creative",
        "detail-oriented", "self-motivated", "team player", "problem solver", "fast learner",
        "proactive", "hands-on",
        # company names
        "google", "facebook", "meta", "amazon", "microsoft", "apple", "netflix", "uber", "airbnb",
        "twitter", "linkedin", "oracle", "ibm", "intel", "cisco", "adobe", "nvidia", "samsung",
        "tcs", "infosys", "wipro", "cognizant", "accenture", "deloitte", "capgemini", "hcl",
    }
)

# Curated candidate shapes scanned in free text. Methodology words (agile, scrum, kanban) and
# ambiguous short words (go, rest, less, ai, ml) are left out so JD prose does not leak in.
_CANDIDATE_TERMS: tuple[str, ...] = (
    "react.js", "reactjs", "react native", "react", "angular.js", "angularjs", "angular",
    "vue.js", "vuejs", "vue", "next.js", "nextjs", "nuxt.js", "nuxt", "node.js", "nodejs", "node",
    "nest.js", "nestjs", "express.js", "expressjs", "express", "svelte", "gatsby", "remix",
    "redux", "jquery", "typescript", "javascript", "python", "java", "golang", "rust", "ruby",
    "php", "swift", "kotlin", "scala", "c++", "c#", ".net", "dotnet", "asp.net", "sql", "nosql",
    "aws", "azure", "gcp", "google cloud", "docker", "kubernetes", "k8s", "terraform", "ansible",
    "jenkins", "helm", "prometheus", "grafana", "datadog", "nginx", "github actions", "gitlab ci",
    "circleci", "serverless", "lambda", "ec2", "s3", "cloudformation", "git", "github", "gitlab",
    "bitbucket", "jira", "confluence", "mysql", "postgresql", "postgres", "mongodb", "redis",
    "elasticsearch", "dynamodb", "cassandra", "sqlite", "firebase", "supabase", "snowflake",
    "bigquery", "graphql", "restful", "rest api", "grpc", "api", "apis", "microservices",
    "kafka", "rabbitmq", "celery", "airflow", "spark", "pyspark", "hadoop", "django", "flask",
    "fastapi", "spring boot", "spring", "laravel", "ruby on rails", "rails", "hibernate",
    "html5", "html", "css3", "css", "sass", "scss", "tailwind", "bootstrap", "webpack", "vite",
    "rollup", "babel", "eslint", "jest", "cypress", "selenium", "playwright", "puppeteer",
    "mocha", "chai", "junit", "pytest", "devsecops", "ci/cd", "cicd", "machine learning",
    "deep learning", "tensorflow", "pytorch", "keras", "scikit-learn", "pandas", "numpy",
    "jupyter", "power bi", "tableau", "figma", "postman", "swagger", "linux", "unix", "bash",
    "powershell", "oauth", "jwt", "flutter", "android", "ios",
)

_CANDIDATE_RE = re.compile(
    r"(?<![a-z0-9+#.@/])(?:"
    + "|".join(re.escape(term) for term in sorted(_CANDIDATE_TERMS, key=len, reverse=True))
    + r")(?![a-z0-9+#]|\.[a-z0-9])",
    re.IGNORECASE,
)
_PRODUCTIVE_RE = re.compile(
    r"(?<![a-z0-9.@/])[a-z]+(?:\.js|-js|js|\.io|\.ai|\.dev|\.app)(?![a-z0-9])",
    re.IGNORECASE,
)
_PRODUCTIVE_SHAPES = (
    re.compile(r"^[a-z]+\.js$"),
    re.compile(r"^[a-z]+js$"),
    re.compile(r"^[a-z]+-js$"),
    re.compile(r"^[a-z]+\.(io|ai|dev|app)$"),
)
_FRAGMENT_RE = re.compile(r"^(the|a|an|is|are|was|were|be|been|being|have|has|had|do|does|did)\s", re.IGNORECASE)

_TITLE_PREFIX_RE = re.compile(r"^(job title|position|role|hiring for):\s*", re.IGNORECASE)
_TITLE_TAIL_RE = re.compile(r"\s*[-–—|]\s*.*$")
_TITLE_PATTERNS = (
    re.compile(r"(?:position|role|job):\s*([^\n]+)", re.IGNORECASE),
    re.compile(
        r"(?:looking for|seeking|hiring)\s+(?:a|an)?\s*([a-z\s]+?(?:engineer|developer|architect|manager|analyst|designer))",
        re.IGNORECASE,
    ),
    re.compile(
        r"^([A-Z][a-z]+(?:\s+[A-Z][a-z]+)*\s+(?:Engineer|Developer|Architect|Manager|Analyst|Designer))",
        re.MULTILINE,
    ),
)
DEFAULT_JOB_TITLE = "Software Engineer"

_SENIORITY_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("senior", re.compile(r"\b(senior|sr\.?|principal|staff|architect)\b", re.IGNORECASE)),
    ("mid", re.compile(r"\b(mid[\s-]?level|intermediate|3[\s-]+5\s+years?)\b", re.IGNORECASE)),
    ("junior", re.compile(r"\b(junior|jr\.?|entry[\s-]?level|1[\s-]+2\s+years?|graduate)\b", re.IGNORECASE)),
    ("intern", re.compile(r"\b(intern|internship|co[\s-]?op|trainee)\b", re.IGNORECASE)),
    ("lead", re.compile(r"\b(director|vp|cto|head of|10\+\s+years?)\b", re.IGNORECASE)),
)


def is_valid_tech_skill(keyword: str) -> bool:
    if not keyword or not isinstance(keyword, str):
        return False

    kw = keyword.strip().lower()
    if not 1 <= len(kw) <= 30:
        return False
    if "\n" in kw or "\r" in kw or "  " in kw:
        return False
    if kw in INVALID_SKILL_WORDS:
        return False
    if kw in VALID_TECH_SKILLS:
        return True
    return any(shape.match(kw) for shape in _PRODUCTIVE_SHAPES)


def scan_skill_mentions(text: str) -> list[tuple[int, str]]:
    """Every valid technology mention as (offset, lowercased token), in text order."""
    if not text:
        return []

    by_start: dict[int, str] = {}
    for pattern in (_CANDIDATE_RE, _PRODUCTIVE_RE):
        for match in pattern.finditer(text):
            token = match.group(0).lower()
            current = by_start.get(match.start())
            if current is None or len(token) > len(current):
                by_start[match.start()] = token

    return [
        (start, token)
        for start, token in sorted(by_start.items())
        if is_valid_tech_skill(token)
    ]


def extract_skills_in_order(text: str) -> list[str]:
    """Valid technology tokens in order of first appearance, lowercased and deduplicated."""
    ordered: list[str] = []
    seen: set[str] = set()
    for _, token in scan_skill_mentions(text):
        if token in seen:
            continue
        seen.add(token)
        ordered.append(token)
    return ordered


def extract_surface_forms(text: str) -> list[str]:
    """Technology mentions as written in ``text`` (first spelling wins), in order of appearance."""
    ordered: list[str] = []
    seen: set[str] = set()
    for start, token in scan_skill_mentions(text):
        if token in seen:
            continue
        seen.add(token)
        ordered.append(text[start : start + len(token)])
    return ordered


def extract_valid_skills(text: str) -> set[str]:
    return set(extract_skills_in_order(text))


def clean_skill_items(items: Iterable[str]) -> tuple[list[str], list[str]]:
    """Split skill-section entries into (kept, removed) garbage-filtered lists."""
    kept: list[str] = []
    removed: list[str] = []
    for item in items:
        raw = item or ""
        lowered = raw.strip().lower()
        if (
            lowered in INVALID_SKILL_WORDS
            or not 2 <= len(lowered) <= 30
            or "\n" in raw
            or "  " in raw
            or _FRAGMENT_RE.match(raw.strip())
        ):
            if lowered not in {"c", "r"}:
                removed.append(raw)
                continue
        kept.append(raw.strip())
    return kept, removed


def extract_job_title(jd_text: str) -> str:
    lines = [line.strip() for line in (jd_text or "").splitlines() if line.strip()]
    if lines:
        first = lines[0]
        if len(first) < 100 and "." not in first.rstrip("."):
            title = _TITLE_TAIL_RE.sub("", _TITLE_PREFIX_RE.sub("", first)).strip()
            if title:
                return title

    for pattern in _TITLE_PATTERNS:
        match = pattern.search(jd_text or "")
        if match and match.group(1).strip():
            title = _TITLE_TAIL_RE.sub("", match.group(1).strip()).strip()
            if title:
                return normalize_line(title)

    return DEFAULT_JOB_TITLE


def detect_seniority(jd_text: str) -> str:
    for level, pattern in _SENIORITY_PATTERNS:
        if pattern.search(jd_text or ""):
            return level
    return "mid"
