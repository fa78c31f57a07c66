"""List sources for the directory's public list pages."""

from listingkit.core.entities.listing import ListSource
from listingkit.infrastructure.key_builders.listing import (
    CLASSIFIEDS,
    COMPANIES,
    DIRECT_SELLERS,
    NEWS,
)

COMPANIES_SOURCE = ListSource(
    family=COMPANIES,
    collection="mlm_companies",
    select=(
        "id, name, logo_url, country, country_name, category, established, "
        "description, status, slug, created_at, "
        "category_info:company_categories!category(id, name)"
    ),
    base_filters={"status": "approved"},
    filter_columns={"country": "country", "category": "category"},
    search_columns=("name", "description", "country_name"),
    client_search_fields=("name", "description", "country_name", "category_name"),
    flatten={"category_name": "category_info.name"},
    page_size=24,
    needs_ratings=True,
)

CLASSIFIEDS_SOURCE = ListSource(
    family=CLASSIFIEDS,
    collection="classifieds",
    select="*, user:profiles(username, id), category_info:classified_categories(id, name)",
    base_filters={"status": "active"},
    filter_columns={"category": "category"},
    search_columns=("title", "description"),
    client_search_fields=("title", "description", "category_name"),
    flatten={
        "category_name": "category_info.name",
        "username": "user.username",
    },
    page_size=12,
)

NEWS_SOURCE = ListSource(
    family=NEWS,
    collection="news",
    select="*, author:profiles(username, full_name), category:news_categories(id, name)",
    base_filters={"published": True},
    filter_columns={"country": "country_name", "category": "news_category"},
    search_columns=("title",),
    flatten={
        "category_name": "category.name",
        "author_name": "author.full_name",
    },
    page_size=15,
)

DIRECT_SELLERS_SOURCE = ListSource(
    family=DIRECT_SELLERS,
    collection="profiles",
    select="*",
    base_filters={"is_direct_seller": True},
    filter_columns={"country": "country"},
    search_columns=("username", "full_name", "bio"),
    page_size=32,
)
