"""
Basic example of using NodeQL with a strawberry schema and a SQL node store.

This example demonstrates:
- Declaring node types with Strawberry and marking computed fields
- Registering resolvers that run against plain node dicts
- Filtering and sorting on computed fields (resolved lazily, once per batch)
- Finding the root node of an inline object
- Recording page dependencies
"""

import asyncio
import logging
from typing import List, Optional

import strawberry
from strawberry.schema.config import StrawberryConfig

from nodeql import LocalNodeModel, NeedsResolve, NodeSchema, SQLNodeStore


# Strawberry GraphQL Types
@strawberry.interface
class Node:
    id: strawberry.ID


@strawberry.type
class Frontmatter:
    date: Optional[str]
    slug: Optional[str]


@strawberry.type
class Post(Node):
    title: str
    body: Optional[str]
    parent: Optional[strawberry.ID]
    frontmatter: Optional[Frontmatter]
    excerpt: Optional[str] = strawberry.field(directives=[NeedsResolve()], default=None)


@strawberry.type
class Page(Node):
    title: str


@strawberry.type
class Query:
    @strawberry.field
    def posts(self) -> List[Post]:
        return []

    @strawberry.field
    def pages(self) -> List[Page]:
        return []


# Resolvers computing fields on stored nodes
def excerpt(node, args, context, info):
    return (node.get('body') or '')[:24]


def slug(frontmatter, args, context, info):
    return (frontmatter.get('date') or '')[:7] or None


NODES = [
    {'id': 'page-blog', 'internal': {'type': 'Page'}, 'title': 'Blog'},
    {
        'id': 'post-1',
        'parent': 'page-blog',
        'internal': {'type': 'Post'},
        'title': 'Hello NodeQL',
        'body': 'Lazy field resolution for typed node graphs.',
        'frontmatter': {'date': '2024-05-02'},
    },
    {
        'id': 'post-2',
        'parent': 'page-blog',
        'internal': {'type': 'Post'},
        'title': 'Batching',
        'body': 'Concurrent queries share a single resolution pass.',
        'frontmatter': {'date': '2024-06-11'},
    },
]


async def main():
    """Main demo function."""
    logging.basicConfig(level=logging.DEBUG)

    gql_schema = strawberry.Schema(query=Query, types=[Post, Page], config=StrawberryConfig(auto_camel_case=False))
    schema = NodeSchema.from_strawberry(gql_schema, {'Post': {'excerpt': excerpt}, 'Frontmatter': {'slug': slug}})

    store = SQLNodeStore('sqlite://', nodes=NODES)
    dependencies = []
    model = LocalNodeModel(schema, store, create_page_dependency=dependencies.append, path='/blog')

    # Both queries are resolved by one pass over the Post nodes
    lazy, newest = await asyncio.gather(
        model.run_query('Post', {'filter': {'excerpt': {'regex': '/lazy/i'}}}),
        model.run_query('Post', {'sort': {'fields': ['frontmatter.slug'], 'order': ['DESC']}}, first_only=True),
    )
    print("Matched:", [post['title'] for post in lazy])
    print("Newest:", newest['title'], newest['$resolved'])

    root = model.find_root_node_ancestor(newest['frontmatter'])
    print("Root of frontmatter:", root['id'])
    print("Dependencies:", dependencies)

    # Cleanup
    store.engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
