"""
Default NoodleSeed widget catalog.

Each widget is a tool whose result renders into an HTML template resource.
Template markup is produced by the separate widget build and read from the
assets directory at startup; a placeholder is served when it is missing.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

import aiofiles
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from ..core import ToolOutput
from ..logging import get_logger
from .catalog import Catalog, CatalogEntry

logger = get_logger(__name__)

FALLBACK_MARKUP = (
    '<div style="padding: 40px; font-family: -apple-system, BlinkMacSystemFont, '
    '\'Segoe UI\', Roboto, sans-serif; text-align: center; border-radius: 12px;">'
    '<h2 style="margin: 0 0 10px 0;">Widget Not Built</h2>'
    '<p style="margin: 0;">Run the widget build to generate template bundles</p>'
    '</div>'
)


class BusinessTypeArguments(BaseModel):
    """Arguments shared by the business overview widgets"""
    model_config = ConfigDict(extra="forbid")

    business_type: str = Field(
        min_length=1,
        validation_alias=AliasChoices("business_type", "businessType"),
        description="Type of business to show information for",
    )


class SearchArguments(BaseModel):
    model_config = ConfigDict(extra="forbid")

    query: str = Field(min_length=1, description="Free-text search over NoodleSeed topics")
    limit: int = Field(default=5, ge=1, le=20, description="Maximum number of matches")


SEARCH_TOPICS: List[Dict[str, Any]] = [
    {
        "id": "pricing",
        "title": "Pricing plans",
        "summary": "Starter, Growth and Enterprise plans billed monthly or annually.",
        "keywords": ["pricing", "plans", "cost", "billing"],
    },
    {
        "id": "automation",
        "title": "Workflow automation",
        "summary": "Automate bookings, follow-ups and inventory alerts without code.",
        "keywords": ["automation", "workflow", "bookings"],
    },
    {
        "id": "assistant",
        "title": "AI customer assistant",
        "summary": "A conversational assistant trained on your catalog and policies.",
        "keywords": ["assistant", "chat", "support", "customers"],
    },
    {
        "id": "analytics",
        "title": "Sales analytics",
        "summary": "Dashboards for revenue, repeat customers and campaign performance.",
        "keywords": ["analytics", "reports", "dashboard", "sales"],
    },
    {
        "id": "integrations",
        "title": "Integrations",
        "summary": "Connect point-of-sale, calendar and e-commerce platforms.",
        "keywords": ["integrations", "pos", "calendar", "shop"],
    },
]


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z')


def _business_widget_builder(widget_id: str):
    def build(args: BusinessTypeArguments) -> ToolOutput:
        return ToolOutput(structured_payload={
            "business_type": args.business_type,
            "timestamp": _timestamp(),
            "widget_id": widget_id,
        })
    return build


def _search_topics(args: SearchArguments) -> ToolOutput:
    needle = args.query.strip().lower()
    matches = [
        {"id": topic["id"], "title": topic["title"], "summary": topic["summary"]}
        for topic in SEARCH_TOPICS
        if needle in topic["title"].lower()
        or needle in topic["summary"].lower()
        or any(needle in keyword for keyword in topic["keywords"])
    ]
    return ToolOutput(
        display_text=f'Found {len(matches)} NoodleSeed topics for "{args.query}"',
        structured_payload={
            "query": args.query,
            "total": len(matches),
            "results": matches[:args.limit],
            "timestamp": _timestamp(),
        },
    )


# id, title, invoking, invoked, response text, html file
BUSINESS_WIDGETS = [
    (
        "get-started",
        "Get Started with NoodleSeed",
        "Preparing your onboarding guide...",
        "Here's how to get started with NoodleSeed",
        "Get started with NoodleSeed - A guided setup tailored to your business",
        "get-started.html",
    ),
    (
        "noodle-seed-platform",
        "NoodleSeed Platform Overview",
        "Loading NoodleSeed platform...",
        "Here's the NoodleSeed AI platform overview",
        "NoodleSeed AI Platform - Transform your business with intelligent automation",
        "noodle-seed-platform.html",
    ),
    (
        "noodle-seed-list",
        "NoodleSeed Features List",
        "Loading feature list...",
        "Here are the NoodleSeed features",
        "NoodleSeed Features - Comprehensive AI capabilities for your business",
        "noodle-seed-list.html",
    ),
    (
        "noodle-seed-carousel",
        "NoodleSeed Success Stories",
        "Loading success stories...",
        "Browse through our success stories",
        "NoodleSeed Success Stories - Real results from real businesses",
        "noodle-seed-carousel.html",
    ),
]

SEARCH_WIDGET_FILE = "search.html"


def widget_files() -> List[str]:
    """Template file names the catalog expects in the assets directory"""
    return [widget[5] for widget in BUSINESS_WIDGETS] + [SEARCH_WIDGET_FILE]


def default_entries(markup: Optional[Dict[str, str]] = None) -> List[CatalogEntry]:
    """
    Build the default entries.

    Args:
        markup: html file name -> template markup; missing files get the placeholder
    """
    markup = markup or {}
    entries = [
        CatalogEntry(
            id=widget_id,
            uri=f"ui://widget/{html_file}",
            title=title,
            description=title,
            invoking_label=invoking,
            invoked_label=invoked,
            response_text=response_text,
            arguments_model=BusinessTypeArguments,
            response_builder=_business_widget_builder(widget_id),
            payload=markup.get(html_file, FALLBACK_MARKUP),
        )
        for widget_id, title, invoking, invoked, response_text, html_file in BUSINESS_WIDGETS
    ]
    entries.append(CatalogEntry(
        id="search",
        uri=f"ui://widget/{SEARCH_WIDGET_FILE}",
        title="Search NoodleSeed",
        description="Search NoodleSeed features, pricing and integrations",
        invoking_label="Searching NoodleSeed...",
        invoked_label="Here's what we found",
        response_text="NoodleSeed search results",
        arguments_model=SearchArguments,
        response_builder=_search_topics,
        payload=markup.get(SEARCH_WIDGET_FILE, FALLBACK_MARKUP),
    ))
    return entries


async def load_widget_markup(assets_dir: Path, html_file: str) -> Optional[str]:
    """Read one bundled template, returning None when it has not been built"""
    html_path = Path(assets_dir) / html_file
    if not html_path.exists():
        logger.warning(f"Widget HTML not found: {html_path}")
        return None

    async with aiofiles.open(html_path, mode="r", encoding="utf-8") as f:
        content = await f.read()
    logger.info(f"Loaded widget template: {html_file} ({len(content) / 1024:.1f}KB)")
    return content


async def load_default_catalog(assets_dir: str) -> Catalog:
    """Read widget templates from ``assets_dir`` and build the default catalog"""
    markup: Dict[str, str] = {}
    for html_file in widget_files():
        try:
            content = await load_widget_markup(Path(assets_dir), html_file)
        except OSError as e:
            logger.error(f"Error reading widget HTML {html_file}: {e}")
            continue
        if content is not None:
            markup[html_file] = content

    catalog = Catalog(default_entries(markup))
    logger.info(f"Catalog ready with {len(catalog)} entries ({len(markup)} templates built)")
    return catalog
