from nodeql import NodeSchema
from nodeql.core.resolvable import determine_resolvable_fields


def test_plain_fields_need_no_resolution(schema):
    fields = {'title': True, 'views': True, 'frontmatter': {'date': True, 'tags': True}}
    assert determine_resolvable_fields(schema, 'Post', fields) == {}


def test_leaf_with_resolver(schema):
    assert determine_resolvable_fields(schema, 'Post', {'excerpt': True, 'title': True}) == {'excerpt': True}


def test_partial_resolution_of_plain_object(schema):
    fields = {'frontmatter': {'date': True, 'slug': True}}
    assert determine_resolvable_fields(schema, 'Post', fields) == {'frontmatter': {'slug': True}}


def test_composite_with_resolver_and_plain_subfields(schema):
    # `author` has its own resolver; Author.name is plain data
    assert determine_resolvable_fields(schema, 'Post', {'author': {'name': True}}) == {'author': True}


def test_composite_with_resolver_and_resolvable_subfields(schema):
    fields = {'author': {'name': True, 'display_name': True}}
    assert determine_resolvable_fields(schema, 'Post', fields) == {'author': {'display_name': True}}


def test_list_of_objects(schema):
    fields = {'comments': {'text': True, 'shout': True}}
    assert determine_resolvable_fields(schema, 'Post', fields) == {'comments': {'shout': True}}


def test_composite_required_as_leaf(schema):
    assert determine_resolvable_fields(schema, 'Post', {'author': True, 'frontmatter': True}) == {'author': True}


def test_unknown_fields_and_types_are_skipped(schema):
    assert determine_resolvable_fields(schema, 'Post', {'nope': True, 'excerpt': True}) == {'excerpt': True}
    assert determine_resolvable_fields(schema, 'Nope', {'excerpt': True}) == {}


def test_interface_fields_use_directive_marker(schema):
    assert determine_resolvable_fields(schema, 'Content', {'excerpt': True, 'title': True}) == {'excerpt': True}


def test_marker_comes_from_schema_lookup(schema):
    class WithoutExcerpts(NodeSchema):
        def needs_resolve(self, type_name, field_name):
            return field_name != 'excerpt' and super().needs_resolve(type_name, field_name)

    narrowed = WithoutExcerpts(schema.types, config=schema.config)
    fields = {'excerpt': True, 'word_count': True, 'author': {'display_name': True}}
    assert determine_resolvable_fields(narrowed, 'Post', fields) == {
        'word_count': True,
        'author': {'display_name': True},
    }
