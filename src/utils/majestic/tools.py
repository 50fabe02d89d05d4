import json
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Literal, Optional, Sequence, Tuple, Type

import pydantic
from pydantic import BaseModel, ConfigDict, Field
from mcp.types import TextContent, Tool

from src.utils.majestic.client import MajesticClient, ParamValue
from src.utils.majestic.errors import ValidationError
from src.utils.majestic.shaper import extract, first_row

Datasource = Literal["fresh", "historic"]

REF_DOMAINS_ORDER = {"TrustFlow": 0, "CitationFlow": 1, "AlexaRank": 2, "RefDomains": 3}
TOP_PAGES_ORDER = {"ExtBackLinks": 0, "RefDomains": 1, "TrustFlow": 2, "CitationFlow": 3}
NEW_LOST_MODE = {"new": 0, "lost": 1}

TOPIC_SLOTS = 10


class ToolArguments(BaseModel):
    """Base for tool inputs: unknown keys and loose types are rejected"""

    model_config = ConfigDict(extra="forbid", strict=True)


class IndexItemInfoArguments(ToolArguments):
    items: List[str] = Field(
        min_length=1,
        max_length=100,
        description="List of URLs or domains to analyze (max 100)",
    )
    datasource: Datasource = Field(
        default="fresh",
        description="Index to use: fresh (recent) or historic (5+ years)",
    )
    includeSubdomains: bool = Field(
        default=True, description="Include subdomains in the analysis"
    )


class BacklinksArguments(ToolArguments):
    item: str = Field(description="URL or domain to get backlinks for")
    datasource: Datasource = Field(default="fresh", description="Index to use")
    count: int = Field(
        default=100,
        ge=1,
        le=50000,
        description="Number of backlinks to return (max 50000)",
    )
    mode: Literal["0", "1"] = Field(
        default="0",
        description="0 = all backlinks, 1 = one per referring domain",
    )
    filterTopic: Optional[str] = Field(
        default=None, description="Filter by topic (e.g., 'Recreation/Travel')"
    )
    filterRefDomain: Optional[str] = Field(
        default=None, description="Filter by referring domain"
    )


class AnchorTextArguments(ToolArguments):
    item: str = Field(description="URL or domain to analyze")
    datasource: Datasource = Field(default="fresh", description="Index to use")
    count: int = Field(
        default=100, ge=1, le=1000, description="Number of anchor texts to return"
    )
    mode: Literal["0", "1"] = Field(
        default="0", description="0 = phrase anchors, 1 = word anchors"
    )
    textMode: Literal["0", "1", "2"] = Field(
        default="0", description="0 = anchor text, 1 = alt text, 2 = both"
    )


class RefDomainsArguments(ToolArguments):
    item: str = Field(description="URL or domain to analyze")
    datasource: Datasource = Field(default="fresh", description="Index to use")
    count: int = Field(
        default=100,
        ge=1,
        le=50000,
        description="Number of referring domains to return",
    )
    orderBy: Literal["TrustFlow", "CitationFlow", "AlexaRank", "RefDomains"] = Field(
        default="TrustFlow", description="How to order results"
    )
    filterTopic: Optional[str] = Field(
        default=None, description="Filter by topical Trust Flow topic"
    )


class TopPagesArguments(ToolArguments):
    item: str = Field(description="Domain to analyze")
    datasource: Datasource = Field(default="fresh", description="Index to use")
    count: int = Field(
        default=100, ge=1, le=10000, description="Number of pages to return"
    )
    orderBy: Literal["ExtBackLinks", "RefDomains", "TrustFlow", "CitationFlow"] = Field(
        default="ExtBackLinks", description="How to order results"
    )


class TopicsArguments(ToolArguments):
    item: str = Field(description="URL or domain to analyze")
    datasource: Datasource = Field(default="fresh", description="Index to use")


class NewLostBacklinksArguments(ToolArguments):
    item: str = Field(description="Domain to analyze")
    count: int = Field(
        default=100, ge=1, le=50000, description="Number of backlinks to return"
    )
    mode: Literal["new", "lost"] = Field(
        default="new", description="Get new or lost backlinks"
    )


class CompareItemsArguments(ToolArguments):
    items: List[str] = Field(
        min_length=2,
        max_length=5,
        description="List of URLs or domains to compare (2-5 items)",
    )
    datasource: Datasource = Field(default="fresh", description="Index to use")


class NoArguments(ToolArguments):
    pass


def expand_items(items: List[str]) -> Dict[str, ParamValue]:
    """items=<n> followed by item0..item{n-1}"""
    params: Dict[str, ParamValue] = {"items": len(items)}
    for index, item in enumerate(items):
        params[f"item{index}"] = item
    return params


def index_item_info_params(args: IndexItemInfoArguments) -> Dict[str, ParamValue]:
    params = expand_items(args.items)
    params["datasource"] = args.datasource
    params["DesiredTopics"] = 0
    params["GetSubDomainData"] = 1 if args.includeSubdomains else 0
    return params


def backlinks_params(args: BacklinksArguments) -> Dict[str, ParamValue]:
    params: Dict[str, ParamValue] = {
        "item": args.item,
        "datasource": args.datasource,
        "Count": args.count,
        "Mode": args.mode,
    }
    if args.filterTopic:
        params["FilterTopic"] = args.filterTopic
    if args.filterRefDomain:
        params["FilterRefDomain"] = args.filterRefDomain
    return params


def anchor_text_params(args: AnchorTextArguments) -> Dict[str, ParamValue]:
    return {
        "item": args.item,
        "datasource": args.datasource,
        "Count": args.count,
        "Mode": args.mode,
        "TextMode": args.textMode,
    }


def ref_domains_params(args: RefDomainsArguments) -> Dict[str, ParamValue]:
    params: Dict[str, ParamValue] = {
        "item": args.item,
        "datasource": args.datasource,
        "Count": args.count,
        "OrderBy": REF_DOMAINS_ORDER[args.orderBy],
    }
    if args.filterTopic:
        params["FilterTopic"] = args.filterTopic
    return params


def top_pages_params(args: TopPagesArguments) -> Dict[str, ParamValue]:
    return {
        "item": args.item,
        "datasource": args.datasource,
        "Count": args.count,
        "OrderBy": TOP_PAGES_ORDER[args.orderBy],
    }


def topics_params(args: TopicsArguments) -> Dict[str, ParamValue]:
    return {
        "items": 1,
        "item0": args.item,
        "datasource": args.datasource,
        "DesiredTopics": TOPIC_SLOTS,
    }


def new_lost_params(args: NewLostBacklinksArguments) -> Dict[str, ParamValue]:
    return {
        "item": args.item,
        "Count": args.count,
        "Mode": NEW_LOST_MODE[args.mode],
    }


def compare_items_params(args: CompareItemsArguments) -> Dict[str, ParamValue]:
    params = expand_items(args.items)
    params["datasource"] = args.datasource
    return params


def collect_topics(row: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Pair TopicalTrustFlow_Topic_i with TopicalTrustFlow_Value_i, skipping empty slots"""
    topics = []
    for index in range(TOPIC_SLOTS):
        topic = row.get(f"TopicalTrustFlow_Topic_{index}")
        value = row.get(f"TopicalTrustFlow_Value_{index}")
        if topic and value:
            topics.append({"topic": topic, "value": value})
    return topics


def shape_topics(
    args: TopicsArguments, envelope: Dict[str, Any], path: Sequence[str]
) -> Any:
    row = first_row(envelope, path)
    if row is None:
        return envelope
    return {"item": args.item, "topics": collect_topics(row)}


def to_text(payload: Any) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False)


@dataclass(frozen=True)
class ToolDefinition:
    name: str
    description: str
    command: str
    arguments: Type[ToolArguments]
    build_params: Callable[[Any], Dict[str, ParamValue]]
    table_path: Optional[Tuple[str, ...]]
    shape: Optional[Callable[[Any, Dict[str, Any], Sequence[str]], Any]] = None

    def input_schema(self) -> Dict[str, Any]:
        return self.arguments.model_json_schema()

    def to_tool(self) -> Tool:
        return Tool(
            name=self.name,
            description=self.description,
            inputSchema=self.input_schema(),
        )

    def parse_arguments(self, arguments: Optional[Dict[str, Any]]) -> ToolArguments:
        try:
            return self.arguments.model_validate(arguments or {})
        except pydantic.ValidationError as e:
            raise ValidationError(self.name, e.errors(include_url=False)) from e

    async def run(self, args: ToolArguments, client: MajesticClient) -> List[TextContent]:
        """Call Majestic with validated arguments and render the payload as text"""
        envelope = await client.call(self.command, self.build_params(args))

        if self.shape is not None and self.table_path is not None:
            payload = self.shape(args, envelope, self.table_path)
        else:
            payload = extract(envelope, self.table_path)

        return [TextContent(type="text", text=to_text(payload))]


TOOLS = [
    ToolDefinition(
        name="get_index_item_info",
        description="Get Trust Flow, Citation Flow, backlink counts and other key metrics for one or more URLs/domains",
        command="GetIndexItemInfo",
        arguments=IndexItemInfoArguments,
        build_params=index_item_info_params,
        table_path=("Results", "Data"),
    ),
    ToolDefinition(
        name="get_backlinks",
        description="Get detailed backlink data for a URL or domain",
        command="GetBackLinkData",
        arguments=BacklinksArguments,
        build_params=backlinks_params,
        table_path=("BackLinks", "Data"),
    ),
    ToolDefinition(
        name="get_anchor_text",
        description="Get anchor text distribution for a URL or domain",
        command="GetAnchorText",
        arguments=AnchorTextArguments,
        build_params=anchor_text_params,
        table_path=("AnchorText", "Data"),
    ),
    ToolDefinition(
        name="get_ref_domains",
        description="Get list of referring domains linking to a URL or domain",
        command="GetRefDomains",
        arguments=RefDomainsArguments,
        build_params=ref_domains_params,
        table_path=("RefDomains", "Data"),
    ),
    ToolDefinition(
        name="get_top_pages",
        description="Get the most backlinked pages on a domain",
        command="GetTopPages",
        arguments=TopPagesArguments,
        build_params=top_pages_params,
        table_path=("TopPages", "Data"),
    ),
    ToolDefinition(
        name="get_topics",
        description="Get topical Trust Flow breakdown for a URL or domain",
        command="GetIndexItemInfo",
        arguments=TopicsArguments,
        build_params=topics_params,
        table_path=("Results", "Data"),
        shape=shape_topics,
    ),
    ToolDefinition(
        name="get_new_lost_backlinks",
        description="Get recently gained or lost backlinks for a domain",
        command="GetNewLostBackLinks",
        arguments=NewLostBacklinksArguments,
        build_params=new_lost_params,
        table_path=("Data",),
    ),
    ToolDefinition(
        name="compare_items",
        description="Compare Trust Flow, Citation Flow and other metrics across multiple URLs/domains",
        command="GetIndexItemInfo",
        arguments=CompareItemsArguments,
        build_params=compare_items_params,
        table_path=("Results", "Data"),
    ),
    ToolDefinition(
        name="get_subscription_info",
        description="Get current API subscription info, usage and remaining quota",
        command="GetSubscriptionInfo",
        arguments=NoArguments,
        build_params=lambda args: {},
        table_path=None,
    ),
]

TOOLS_BY_NAME = {tool.name: tool for tool in TOOLS}
