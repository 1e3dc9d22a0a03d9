from nodeql.core.utils import merge_trees, path_to_tree


class TestMergeTrees:
    def test_disjoint_keys_commute(self):
        a = {'title': True, 'frontmatter': {'date': True}}
        b = {'views': True, 'author': {'name': True}}
        assert merge_trees(a, b) == merge_trees(b, a)

    def test_idempotent(self):
        a = {'frontmatter': {'date': True, 'tags': True}, 'title': True}
        assert merge_trees(a, a) == a
        assert merge_trees(merge_trees(a, a), a) == a

    def test_nested_merge(self):
        merged = merge_trees({'frontmatter': {'date': True}}, {'frontmatter': {'slug': True}})
        assert merged == {'frontmatter': {'date': True, 'slug': True}}

    def test_subtree_absorbs_leaf_in_either_order(self):
        leaf = {'author': True}
        tree = {'author': {'name': True}}
        assert merge_trees(leaf, tree) == {'author': {'name': True}}
        assert merge_trees(tree, leaf) == {'author': {'name': True}}

    def test_later_scalar_wins(self):
        assert merge_trees({'a': 1, 'b': {'c': 1}}, {'a': 2, 'b': {'c': 3}}) == {'a': 2, 'b': {'c': 3}}

    def test_inputs_are_not_mutated(self):
        a = {'frontmatter': {'date': True}}
        b = {'frontmatter': {'slug': True}}
        merge_trees(a, b)
        assert a == {'frontmatter': {'date': True}}
        assert b == {'frontmatter': {'slug': True}}

    def test_skips_missing_trees(self):
        assert merge_trees(None, {}, {'a': True}) == {'a': True}
        assert merge_trees() == {}


def test_path_to_tree():
    assert path_to_tree('a.b.c') == {'a': {'b': {'c': True}}}
    assert path_to_tree('title') == {'title': True}
    assert path_to_tree('') == {}
    assert path_to_tree(None) == {}
