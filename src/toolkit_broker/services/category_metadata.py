# Category metadata
# Predefined vendor metadata and grouped-vendor prefix rules

from ..models.tool import CategoryMetadata, ResolvedCategoryMetadata


CATEGORY_METADATA: dict[str, CategoryMetadata] = {
    "github": CategoryMetadata(
        display_name="GitHub",
        description="GitHub repository, issue, PR, workflow, and collaboration tools",
    ),
    "vercel": CategoryMetadata(
        display_name="Vercel",
        description="Vercel deployment, project, domain, and serverless platform tools",
    ),
    "neon": CategoryMetadata(
        display_name="Neon",
        description="Neon serverless Postgres database management tools",
    ),
    "upstash": CategoryMetadata(
        display_name="Upstash Redis",
        description="Upstash Redis database operations and management tools",
    ),
    "google": CategoryMetadata(
        display_name="Google Workspace",
        description="Gmail, Drive, Calendar, Sheets, Docs, and other Google Workspace tools",
    ),
    "openai": CategoryMetadata(
        display_name="OpenAI",
        description="OpenAI API tools for chat, embeddings, images, audio, assistants and fine-tuning",
    ),
    "stripe": CategoryMetadata(
        display_name="Stripe",
        description="Stripe payment processing, subscriptions, invoices, and billing tools",
    ),
    "supabase": CategoryMetadata(
        display_name="Supabase",
        description="Supabase database, authentication, storage, and edge functions tools",
    ),
    "playwright": CategoryMetadata(
        display_name="Playwright",
        description="Playwright browser automation and web scraping tools",
    ),
    "twilio": CategoryMetadata(
        display_name="Twilio",
        description="Twilio SMS, voice, video, and messaging tools",
    ),
    "resend": CategoryMetadata(
        display_name="Resend",
        description="Resend email delivery and management tools",
    ),
    "cloudflare": CategoryMetadata(
        display_name="Cloudflare",
        description="Cloudflare DNS, CDN, Workers, and security tools",
    ),
    "postgres": CategoryMetadata(
        display_name="PostgreSQL",
        description="PostgreSQL database with pgvector for semantic search and embeddings",
    ),
    "neo4j": CategoryMetadata(
        display_name="Neo4j",
        description="Neo4j graph database for knowledge graphs and relationship mapping",
    ),
    "qdrant": CategoryMetadata(
        display_name="Qdrant",
        description="Qdrant vector search engine for semantic similarity and embeddings",
    ),
    "n8n": CategoryMetadata(
        display_name="N8N",
        description="N8N workflow automation and integration platform",
    ),
}

# Vendors that publish several product-line prefixes under one parent category.
# Each prefix includes its trailing underscore.
GROUPED_VENDOR_PREFIXES: dict[str, tuple[str, ...]] = {
    "google": (
        "gmail_", "drive_", "calendar_", "sheets_", "docs_", "slides_",
        "tasks_", "people_", "forms_", "classroom_", "chat_", "admin_",
        "reports_", "licensing_",
    ),
}


def grouped_parent(tool_name: str) -> tuple[str, str] | None:
    """Return (parent category, matching prefix) for grouped-vendor tool names."""
    for parent, prefixes in GROUPED_VENDOR_PREFIXES.items():
        for prefix in prefixes:
            if tool_name.startswith(prefix):
                return parent, prefix
    return None


def synthesize_default_metadata(category: str) -> CategoryMetadata:
    """Default metadata for a vendor missing from CATEGORY_METADATA."""
    display_name = category[:1].upper() + category[1:]
    return CategoryMetadata(
        display_name=display_name,
        description=f"{display_name} integration tools",
        enabled=True,
    )


def resolve_category_metadata(
    category: str,
    known: dict[str, CategoryMetadata] | None = None,
) -> ResolvedCategoryMetadata:
    """Look up predefined metadata, falling back to a synthesized default."""
    table = CATEGORY_METADATA if known is None else known
    metadata = table.get(category)
    if metadata is not None:
        return ResolvedCategoryMetadata(metadata=metadata, source="predefined")
    return ResolvedCategoryMetadata(
        metadata=synthesize_default_metadata(category), source="synthesized"
    )
