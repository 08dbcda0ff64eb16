"""Test reply-chain root resolution"""

from archive_threads import ChainOutcome, RecordIndex, ReplyChainResolver
from tests.fixtures import make_post, scenario_chain_posts


def _resolver(posts):
    return ReplyChainResolver(RecordIndex(posts))


class TestResolveRoot:
    """Test ReplyChainResolver.resolve_root"""

    def test_root_resolves_to_itself(self):
        """Test a post with no reply pointer is its own root"""
        post = make_post("A")
        resolution = _resolver([post]).resolve(post)

        assert resolution.root_id == "A"
        assert resolution.outcome == ChainOutcome.ROOT

    def test_linear_chain(self):
        """Test every post of a chain resolves to the first post"""
        posts = scenario_chain_posts()
        resolver = _resolver(posts)

        assert [resolver.resolve_root(p) for p in posts] == ["A", "A", "A"]

    def test_branching_chain(self):
        """Test sibling replies share the same root"""
        posts = [
            make_post("A"),
            make_post("B", "A", minutes=1),
            make_post("C", "A", minutes=2),
            make_post("D", "C", minutes=3),
        ]
        resolver = _resolver(posts)

        assert {resolver.resolve_root(p) for p in posts} == {"A"}

    def test_missing_parent_becomes_root(self):
        """Test a reply whose parent is absent becomes the root"""
        post = make_post("D", reply_to="missing123")
        resolution = _resolver([post]).resolve(post)

        assert resolution.root_id == "D"
        assert resolution.outcome == ChainOutcome.MISSING_PARENT

    def test_missing_parent_deeper_in_chain(self):
        """Test the earliest reachable ancestor is the root when the chain is broken"""
        posts = [
            make_post("B", "gone", minutes=1),
            make_post("C", "B", minutes=2),
            make_post("D", "C", minutes=3),
        ]
        resolver = _resolver(posts)

        assert resolver.resolve_root(posts[2]) == "B"
        assert resolver.resolve(posts[1]).outcome == ChainOutcome.MISSING_PARENT

    def test_resolution_does_not_depend_on_order(self):
        """Test resolving leaves first gives the same roots as roots first"""
        posts = scenario_chain_posts()

        forward = _resolver(posts)
        backward = _resolver(posts)

        expected = {p.id: forward.resolve_root(p) for p in posts}
        actual = {p.id: backward.resolve_root(p) for p in reversed(posts)}
        assert actual == expected


class TestCycles:
    """Test cycle detection in reply pointers"""

    def test_two_post_cycle(self):
        """Test E replying to F replying to E gives two self-rooted posts"""
        e = make_post("E", "F", minutes=0)
        f = make_post("F", "E", minutes=1)
        resolver = _resolver([e, f])

        assert resolver.resolve(e).root_id == "E"
        assert resolver.resolve(f).root_id == "F"
        assert resolver.resolve(e).outcome == ChainOutcome.CYCLE
        assert resolver.resolve(f).outcome == ChainOutcome.CYCLE

    def test_self_reply(self):
        """Test a post replying to itself terminates"""
        post = make_post("S", "S")
        resolution = _resolver([post]).resolve(post)

        assert resolution.root_id == "S"
        assert resolution.outcome == ChainOutcome.CYCLE

    def test_chain_leading_into_cycle(self):
        """Test a post whose ancestors loop is treated as its own root"""
        posts = [
            make_post("E", "F", minutes=0),
            make_post("F", "E", minutes=1),
            make_post("G", "E", minutes=2),
        ]
        resolver = _resolver(posts)

        assert resolver.resolve_root(posts[2]) == "G"
        assert resolver.resolve_root(posts[0]) == "E"
        assert resolver.resolve_root(posts[1]) == "F"

    def test_cycle_results_do_not_depend_on_order(self):
        """Test cyclic posts resolve the same whichever is visited first"""
        posts = [make_post("E", "F"), make_post("F", "E", minutes=1), make_post("G", "F", minutes=2)]

        for ordering in (posts, list(reversed(posts))):
            resolver = _resolver(posts)
            roots = {p.id: resolver.resolve_root(p) for p in ordering}
            assert roots == {"E": "E", "F": "F", "G": "G"}
