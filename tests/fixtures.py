"""Node fixtures for NodeQL tests (shared)."""


def make_nodes():
    """Fresh sample nodes; tests may mutate them freely."""
    return [
        {'id': 'author-1', 'internal': {'type': 'Author', 'owner': 'tests'}, 'name': 'Ada'},
        {'id': 'author-2', 'internal': {'type': 'Author', 'owner': 'tests'}, 'name': 'Grace'},
        {
            'id': 'post-1',
            'internal': {'type': 'Post', 'owner': 'tests'},
            'title': 'Hello',
            'body': 'hello world from nodeql',
            'views': 10,
            'author_id': 'author-1',
            'frontmatter': {'date': '2020-01-05', 'tags': ['intro', 'hello']},
            'comments': [{'text': 'a'}, {'text': 'bb'}, {'text': 'ccc'}],
        },
        {
            'id': 'post-2',
            'internal': {'type': 'Post', 'owner': 'tests'},
            'title': 'Second',
            'body': 'second post body',
            'views': 3,
            'author_id': 'author-2',
            'frontmatter': {'date': '2021-03-01', 'tags': ['graphql']},
            'comments': [],
        },
        {
            'id': 'post-3',
            'parent': 'page-1',
            'internal': {'type': 'Post', 'owner': 'tests'},
            'title': 'Third',
            'body': 'a b c d e f',
            'views': 7,
            'author_id': 'author-1',
            'frontmatter': {'date': '2019-12-31', 'tags': []},
        },
        {'id': 'page-1', 'internal': {'type': 'Page', 'owner': 'tests'}, 'title': 'About'},
        {'id': 'draft-1', 'internal': {'type': 'Draft', 'owner': 'tests'}, 'title': 'WIP'},
    ]
