import asyncio

import pytest

from nodeql.core.batching import ResolutionBatcher
from nodeql.core.fields import TypeDef

POST = TypeDef(name='Post', kind='object')
AUTHOR = TypeDef(name='Author', kind='object')


class PassRecorder:
    """Fake resolution pass recording its inputs and concurrency."""

    def __init__(self, delay=0.0, error=None):
        self.calls = []
        self.delay = delay
        self.error = error
        self.active = 0
        self.max_active = 0

    async def __call__(self, type_def, query_fields, fields_to_resolve):
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            self.calls.append((type_def.name, query_fields, fields_to_resolve))
            await asyncio.sleep(self.delay)
            if self.error is not None:
                raise self.error
        finally:
            self.active -= 1


@pytest.mark.asyncio
async def test_same_tick_requests_share_one_pass():
    run_pass = PassRecorder()
    batcher = ResolutionBatcher(run_pass)
    f1 = batcher.schedule(POST, {'excerpt': True}, {'excerpt': True})
    f2 = batcher.schedule(POST, {'frontmatter': {'slug': True}, 'title': True}, {'frontmatter': {'slug': True}})
    assert f1 is f2
    assert batcher.pending_requests('Post') == 2
    # Nothing runs until the current synchronous work yields
    assert run_pass.calls == []
    await asyncio.gather(f1, f2)
    assert run_pass.calls == [(
        'Post',
        {'excerpt': True, 'frontmatter': {'slug': True}, 'title': True},
        {'excerpt': True, 'frontmatter': {'slug': True}},
    )]
    assert f1.done() and f2.done()


@pytest.mark.asyncio
async def test_empty_resolvable_tree_skips_pass():
    run_pass = PassRecorder()
    batcher = ResolutionBatcher(run_pass)
    await batcher.schedule(POST, {'title': True}, {})
    assert run_pass.calls == []


@pytest.mark.asyncio
async def test_requests_during_a_pass_go_to_the_next_batch():
    run_pass = PassRecorder(delay=0.01)
    batcher = ResolutionBatcher(run_pass)
    first = batcher.schedule(POST, {'excerpt': True}, {'excerpt': True})
    await asyncio.sleep(0.001)
    assert batcher.is_running('Post')
    second = batcher.schedule(POST, {'word_count': True}, {'word_count': True})
    third = batcher.schedule(POST, {'author': True}, {'author': True})
    assert second is not first
    assert second is third
    await asyncio.gather(first, second)
    assert [c[2] for c in run_pass.calls] == [
        {'excerpt': True},
        {'word_count': True, 'author': True},
    ]
    assert run_pass.max_active == 1
    assert not batcher.is_running('Post')


@pytest.mark.asyncio
async def test_types_are_batched_independently():
    run_pass = PassRecorder(delay=0.005)
    batcher = ResolutionBatcher(run_pass)
    await asyncio.gather(
        batcher.schedule(POST, {'excerpt': True}, {'excerpt': True}),
        batcher.schedule(AUTHOR, {'display_name': True}, {'display_name': True}),
    )
    assert sorted(c[0] for c in run_pass.calls) == ['Author', 'Post']
    assert run_pass.max_active == 2


@pytest.mark.asyncio
async def test_failed_pass_fails_every_caller():
    run_pass = PassRecorder(error=RuntimeError('resolver exploded'))
    batcher = ResolutionBatcher(run_pass)
    f1 = batcher.schedule(POST, {'excerpt': True}, {'excerpt': True})
    f2 = batcher.schedule(POST, {'word_count': True}, {'word_count': True})
    results = await asyncio.gather(f1, f2, return_exceptions=True)
    assert all(isinstance(r, RuntimeError) for r in results)
    assert len(run_pass.calls) == 1
    # The batcher recovers for later requests
    run_pass.error = None
    await batcher.schedule(POST, {'excerpt': True}, {'excerpt': True})
    assert len(run_pass.calls) == 2
