"""Tests for the GraphModel structural queries."""

from __future__ import annotations

from card_pipeline.core.graph import GraphModel


class TestDependencies:
    """Tests for ``GraphModel.dependencies``."""

    def test_sources_in_connection_order_without_repeats(self, make_card, make_connection) -> None:
        """Each feeding card is listed once, in the order its first connection appears."""
        cards = [make_card("t", inputs=["a", "b", "c"]), make_card("s1", outputs=["o"]), make_card("s2", outputs=["o"])]
        connections = [
            make_connection("s2", "o", "t", "a"),
            make_connection("s1", "o", "t", "b"),
            make_connection("s2", "o", "t", "c"),
        ]

        assert GraphModel(cards, connections).dependencies("t") == ["s2", "s1"]

    def test_card_without_inputs_has_no_dependencies(self, make_card) -> None:
        """Generator-style cards depend on nothing."""
        graph = GraphModel([make_card("g", outputs=["o"])], [])
        assert graph.dependencies("g") == []


class TestPortLookups:
    """Tests for connection and port lookups."""

    def test_incoming_connection_first_wins(self, make_card, make_connection) -> None:
        """With two connections into one port, the first is returned."""
        first = make_connection("a", "o", "t", "x")
        second = make_connection("b", "o", "t", "x")
        cards = [make_card("a", outputs=["o"]), make_card("b", outputs=["o"]), make_card("t", inputs=["x"])]
        graph = GraphModel(cards, [first, second])

        assert graph.incoming_connection("t", "t.in.x") is first

    def test_incoming_connection_none_when_unconnected(self, make_card) -> None:
        """Unconnected input ports have no incoming connection."""
        graph = GraphModel([make_card("t", inputs=["x"])], [])
        assert graph.incoming_connection("t", "t.in.x") is None

    def test_source_port_resolves_by_id(self, make_card, make_connection) -> None:
        """The source port is found on the source card by id."""
        connection = make_connection("a", "count", "t", "x")
        graph = GraphModel([make_card("a", outputs=["count"]), make_card("t", inputs=["x"])], [connection])

        port = graph.source_port(connection)
        assert port is not None
        assert port.name == "count"

    def test_dangling_connections_reported(self, make_card, make_connection) -> None:
        """Connections to missing cards or ports are listed as dangling."""
        good = make_connection("a", "o", "t", "x")
        missing_card = make_connection("ghost", "o", "t", "x")
        missing_port = make_connection("a", "nope", "t", "x")
        graph = GraphModel(
            [make_card("a", outputs=["o"]), make_card("t", inputs=["x"])],
            [good, missing_card, missing_port],
        )

        assert graph.source_port(missing_card) is None
        assert graph.dangling_connections() == [missing_card, missing_port]

    def test_duplicate_card_ids_keep_first(self, make_card) -> None:
        """The first card wins when ids collide."""
        first = make_card("a")
        graph = GraphModel([first, make_card("a")], [])

        assert graph.cards == [first]
        assert graph.card("a") is first

    def test_dangling_connections_do_not_create_dependencies(self, make_card, make_connection) -> None:
        """Connections to missing cards or ports are invisible to dependency queries."""
        graph = GraphModel(
            [make_card("a", inputs=["x"], outputs=["y"]), make_card("b", inputs=["x"], outputs=["y"])],
            [make_connection("ghost", "y", "a", "x"), make_connection("b", "nope", "a", "x")],
        )

        assert graph.dependencies("a") == []
        assert graph.incoming_connection("a", "a.in.x") is None

    def test_valid_connection_after_dangling_one_feeds_port(self, make_card, make_connection) -> None:
        """A dangling connection listed first does not shadow a valid one."""
        valid = make_connection("b", "y", "a", "x")
        graph = GraphModel(
            [make_card("a", inputs=["x"]), make_card("b", outputs=["y"])],
            [make_connection("ghost", "y", "a", "x"), valid],
        )

        assert graph.incoming_connection("a", "a.in.x") is valid
        assert graph.dependencies("a") == ["b"]
