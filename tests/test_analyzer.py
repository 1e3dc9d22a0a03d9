from nodeql.core.analyzer import QueryAnalyzer, drop_query_operators, get_query_fields


class TestDropQueryOperators:
    def test_operator_leaves_become_true(self):
        assert drop_query_operators({'title': {'eq': 'Hello'}, 'views': {'gt': 1, 'lt': 5}}) == {
            'title': True,
            'views': True,
        }

    def test_nested_fields_keep_their_shape(self):
        flt = {'frontmatter': {'date': {'gt': '2020'}, 'tags': {'in': ['a']}}}
        assert drop_query_operators(flt) == {'frontmatter': {'date': True, 'tags': True}}

    def test_elem_match_is_unwrapped(self):
        flt = {'comments': {'elemMatch': {'text': {'eq': 'a'}, 'author': {'name': {'eq': 'Ada'}}}}}
        assert drop_query_operators(flt) == {'comments': {'text': True, 'author': {'name': True}}}

    def test_list_operand_is_a_leaf(self):
        assert drop_query_operators({'tags': {'in': ['x', 'y']}}) == {'tags': True}


class TestGetQueryFields:
    def test_merges_filter_sort_group_and_distinct(self):
        fields = get_query_fields(
            filter={'frontmatter': {'date': {'ne': None}}},
            sort={'fields': ['frontmatter.slug', 'title'], 'order': ['DESC']},
            group='author.name',
            distinct=['frontmatter.tags'],
        )
        assert fields == {
            'frontmatter': {'date': True, 'slug': True, 'tags': True},
            'title': True,
            'author': {'name': True},
        }

    def test_sort_as_plain_list(self):
        assert get_query_fields(sort=['views', 'frontmatter.date']) == {
            'views': True,
            'frontmatter': {'date': True},
        }

    def test_empty_query(self):
        assert get_query_fields() == {}

    def test_malformed_input_degrades_to_empty(self):
        assert get_query_fields(filter='title = 1', sort=42, group=[None, '']) == {}

    def test_leaf_and_subtree_for_same_field(self):
        fields = get_query_fields(filter={'frontmatter': {'eq': None}}, sort=['frontmatter.date'])
        assert fields == {'frontmatter': {'date': True}}


def test_query_analyzer_builds_plan(schema):
    plan = QueryAnalyzer(schema).analyze('Post', {
        'filter': {'excerpt': {'regex': '/hello/'}, 'views': {'gt': 1}},
        'sort': {'fields': ['frontmatter.slug']},
    })
    assert plan.query_fields == {'excerpt': True, 'views': True, 'frontmatter': {'slug': True}}
    assert plan.fields_to_resolve == {'excerpt': True, 'frontmatter': {'slug': True}}


def test_query_analyzer_without_query(schema):
    plan = QueryAnalyzer(schema).analyze('Post', None)
    assert plan.query_fields == {}
    assert plan.fields_to_resolve == {}
