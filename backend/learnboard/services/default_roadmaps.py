"""Built-in roadmap templates, merged through the regular import path."""

from collections.abc import Iterable

from learnboard.core.logging import get_logger
from learnboard.schemas.fragment import ImportReport, RoadmapFragment, SkippedFragment
from learnboard.schemas.language import LanguageCatalog
from learnboard.schemas.roadmap import TreeState
from learnboard.services import import_service

logger = get_logger(__name__)


def _template(title: str, language: str, description: str, sections: list[tuple[str, str, list[str]]]) -> RoadmapFragment:
    return RoadmapFragment.model_validate(
        {
            "title": title,
            "languageName": language,
            "description": description,
            "sections": [
                {"title": s_title, "description": s_description, "topics": topics}
                for s_title, s_description, topics in sections
            ],
        }
    )


DEFAULT_ROADMAPS: dict[str, RoadmapFragment] = {
    "python": _template(
        "Python Developer Roadmap",
        "Python",
        "Learn Python from beginner to professional",
        [
            ("Python Basics", "Learn the fundamentals", ["Variables and data types", "Arithmetic operators", "Conditionals", "Loops", "Functions", "Exception handling"]),
            ("Data Structures", "Understand the built-in collections", ["Lists", "Dictionaries", "Sets", "Tuples", "List comprehensions", "Generators"]),
            ("Object-Oriented Programming", "OOP concepts", ["Classes and objects", "Inheritance", "Encapsulation", "Polymorphism", "Abstract classes", "Decorators"]),
            ("Libraries and Tooling", "The Python toolbox", ["pip and virtualenv", "NumPy", "Pandas", "Requests", "Testing with pytest", "Documentation"]),
        ],
    ),
    "django": _template(
        "Django Developer Roadmap",
        "Python",
        "Build web applications with Django",
        [
            ("Django Basics", "Getting started", ["Project setup", "Project layout", "Apps", "Settings", "URLs and views", "Templates"]),
            ("Models and Databases", "Working with data", ["ORM models", "Migrations", "QuerySets", "Relations", "Admin interface", "Fixtures"]),
            ("Forms and Authentication", "Users and security", ["Django forms", "ModelForms", "Authentication", "Authorization", "Sessions", "CSRF protection"]),
            ("Django REST Framework", "Building APIs", ["Serializers", "ViewSets", "Routers", "Authentication", "Permissions", "Pagination"]),
            ("Deployment", "Shipping to production", ["Gunicorn/uWSGI", "Nginx", "Static files", "Docker", "CI/CD", "Monitoring"]),
        ],
    ),
    "laravel": _template(
        "Laravel Developer Roadmap",
        "PHP",
        "Build PHP web applications with Laravel",
        [
            ("Laravel Basics", "Getting started", ["Installing Laravel", "Project layout", "Artisan CLI", "Routing", "Controllers", "Views and Blade"]),
            ("Databases", "Eloquent ORM", ["Migrations", "Eloquent models", "Query builder", "Relationships", "Seeders and factories", "Soft deletes"]),
            ("Authentication and Security", "Protecting the application", ["Laravel Breeze/Jetstream", "Authentication", "Authorization and gates", "Policies", "Middleware", "CSRF and XSS"]),
            ("Advanced Features", "Advanced tooling", ["Queues and jobs", "Events and listeners", "Broadcasting", "Task scheduling", "Mail", "Notifications"]),
            ("API Development", "Building APIs", ["API resources", "Sanctum/Passport", "Rate limiting", "API versioning", "Testing APIs", "Documentation"]),
        ],
    ),
    "react": _template(
        "React.js Developer Roadmap",
        "JavaScript",
        "Build user interfaces with React.js",
        [
            ("React Basics", "Getting started", ["JSX", "Components", "Props", "State", "Event handling", "Conditional rendering"]),
            ("React Hooks", "Using hooks", ["useState", "useEffect", "useContext", "useReducer", "useMemo", "useCallback", "Custom hooks"]),
            ("State Management", "Application state", ["Context API", "Redux Toolkit", "Zustand", "Jotai/Recoil", "React Query", "SWR"]),
            ("Routing and Forms", "Navigation and input", ["React Router", "Protected routes", "React Hook Form", "Formik", "Yup/Zod validation", "File uploads"]),
            ("Performance and Testing", "Making it fast and safe", ["React.memo", "Code splitting", "Lazy loading", "Testing with Jest", "React Testing Library", "E2E testing"]),
        ],
    ),
    "wordpress": _template(
        "WordPress Plugin Developer Roadmap",
        "PHP",
        "Develop WordPress plugins",
        [
            ("WordPress Basics", "Understanding WordPress", ["WordPress architecture", "The Loop", "Template hierarchy", "Hooks: actions and filters", "WordPress APIs", "Database structure"]),
            ("Plugin Development", "Building a plugin", ["Plugin structure", "Plugin headers", "Activation/deactivation", "Uninstall", "Settings API", "Options API"]),
            ("Security", "Protecting the plugin", ["Nonces", "Data validation", "Data sanitization", "Escaping output", "Capabilities", "SQL injection prevention"]),
            ("Advanced Features", "Advanced development", ["Custom post types", "Custom taxonomies", "Meta boxes", "REST API", "Gutenberg blocks", "AJAX in WordPress"]),
            ("Release and Distribution", "Publishing the plugin", ["Internationalization (i18n)", "Documentation", "WordPress.org guidelines", "Version control", "Automated testing", "Freemius/EDD"]),
        ],
    ),
    "vue": _template(
        "Vue.js Developer Roadmap",
        "JavaScript",
        "Build user interfaces with Vue.js",
        [
            ("Vue Basics", "Getting started", ["Vue instance", "Template syntax", "Directives", "Computed properties", "Watchers", "Class and style bindings"]),
            ("Components", "Component model", ["Component basics", "Props", "Events", "Slots", "Dynamic components", "Async components"]),
            ("Composition API", "Vue 3 composition", ["ref and reactive", "computed", "watch and watchEffect", "Lifecycle hooks", "Composables", "Provide/inject"]),
            ("State and Routing", "Application state and navigation", ["Vue Router", "Route guards", "Pinia", "Vuex (legacy)", "Persisted state", "Navigation"]),
            ("Tooling and Deployment", "Tooling", ["Vite", "Vue DevTools", "Testing with Vitest", "Nuxt.js", "SSR/SSG", "Deployment"]),
        ],
    ),
    "nestjs": _template(
        "NestJS Developer Roadmap",
        "TypeScript",
        "Build backends with NestJS",
        [
            ("NestJS Basics", "Getting started", ["Installing NestJS", "Project layout", "Modules", "Controllers", "Providers/services", "Dependency injection"]),
            ("Working with Data", "Databases", ["TypeORM integration", "Prisma integration", "Entities", "Repositories", "Migrations", "Transactions"]),
            ("Authentication and Authorization", "Auth and security", ["Passport.js", "JWT strategy", "Local strategy", "Guards", "Roles and permissions", "Rate limiting"]),
            ("Advanced Features", "Request pipeline", ["Middleware", "Interceptors", "Pipes", "Exception filters", "Custom decorators", "Events"]),
            ("Microservices and Testing", "Going further", ["GraphQL integration", "WebSockets", "Microservices", "Message queues", "Unit testing", "E2E testing"]),
        ],
    ),
    "nextjs": _template(
        "Next.js Developer Roadmap",
        "TypeScript",
        "Build React applications with Next.js",
        [
            ("Next.js Basics", "Getting started", ["Creating a Next project", "App Router vs Pages", "File-based routing", "Layouts", "Loading and error states", "Linking and navigation"]),
            ("Data Fetching", "Loading data", ["Server components", "Client components", "fetch on the server", "Caching", "Revalidation", "Parallel fetching"]),
            ("Server Actions", "Mutations", ["Form actions", "Server actions", "Mutations", "Optimistic updates", "Error handling", "Validation"]),
            ("Optimization", "Performance", ["Image component", "Font optimization", "Metadata API", "Static generation", "Dynamic rendering", "Streaming"]),
            ("Deployment", "Going to production", ["Vercel deployment", "Self-hosting", "Environment variables", "Edge runtime", "Middleware", "Analytics"]),
        ],
    ),
    "javascript": _template(
        "JavaScript Developer Roadmap",
        "JavaScript",
        "Learn JavaScript from beginner to professional",
        [
            ("JavaScript Basics", "The fundamentals", ["Variables let/const/var", "Data types", "Operators", "Conditionals", "Loops", "Functions"]),
            ("Data and Objects", "Data structures", ["Arrays and methods", "Objects", "Destructuring", "Spread/rest", "Maps and Sets", "JSON"]),
            ("Advanced JavaScript", "How the language works", ["Closures", "Prototypes", "Classes", "this keyword", "call/apply/bind", "ES6 modules"]),
            ("Asynchronous JavaScript", "Async programming", ["Callbacks", "Promises", "async/await", "Event loop", "Fetch API", "Error handling"]),
            ("DOM and Browser APIs", "Working in the browser", ["DOM manipulation", "Events", "Local storage", "Web APIs", "Fetch/Axios", "WebSockets"]),
        ],
    ),
    "fastapi": _template(
        "FastAPI Developer Roadmap",
        "Python",
        "Build fast APIs with FastAPI",
        [
            ("FastAPI Basics", "Getting started", ["Installing FastAPI", "First API", "Path parameters", "Query parameters", "Request body", "Response models"]),
            ("Pydantic and Validation", "Validating data", ["Pydantic models", "Field validation", "Custom validators", "Nested models", "Config", "Schema generation"]),
            ("Databases", "Database integration", ["SQLAlchemy", "Async SQLAlchemy", "Alembic migrations", "CRUD operations", "Tortoise ORM", "MongoDB integration"]),
            ("Authentication and Security", "Security", ["OAuth2 password flow", "JWT tokens", "Password hashing", "Dependencies", "API keys", "CORS"]),
            ("Advanced Features", "Advanced topics", ["Background tasks", "WebSockets", "File uploads", "Testing", "Docker deployment", "API documentation"]),
        ],
    ),
}


def list_default_roadmaps() -> list[dict[str, str | int]]:
    """Summary of the built-in templates for a picker."""
    return [
        {
            "id": template_id,
            "title": fragment.title,
            "language": fragment.language or "",
            "description": fragment.description,
            "section_count": len(fragment.sections),
        }
        for template_id, fragment in DEFAULT_ROADMAPS.items()
    ]


def import_default_roadmaps(
    state: TreeState,
    catalog: LanguageCatalog,
    template_ids: Iterable[str] | None = None,
) -> ImportReport:
    """Merge the selected built-in templates (all of them when none are given).

    Templates whose title already exists are skipped like any other fragment.
    """
    selected = list(DEFAULT_ROADMAPS) if template_ids is None else list(template_ids)

    fragments: list[RoadmapFragment] = []
    unknown: list[SkippedFragment] = []
    for template_id in selected:
        fragment = DEFAULT_ROADMAPS.get(template_id)
        if fragment is None:
            unknown.append(SkippedFragment(title=template_id, reason=import_service.REASON_UNKNOWN_TEMPLATE))
        else:
            fragments.append(fragment)

    report = import_service.import_roadmaps(state, catalog, fragments)
    report.skipped.extend(unknown)
    logger.info("Default roadmaps imported", requested=len(selected), created=len(report.created_roadmap_ids))
    return report
