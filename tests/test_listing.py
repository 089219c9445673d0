"""
Tests for coinrecord/listing.py: search filter, pagination, sorting, carousel
"""
from coinrecord.listing import CoinListView, fetch_coins, filter_coins, next_photo_index
from coinrecord.models import CoinRecord


def _coins(n):
    return [CoinRecord(coin_no=f"C{i}", country="India", material="Copper") for i in range(1, n + 1)]


class TestFilterCoins:
    coins = [
        CoinRecord(coin_no="AB-12", country="France", material="Gold"),
        CoinRecord(coin_no="zz-1", country="united KINGDOM", material="Silver"),
        CoinRecord(coin_no="Q7", country="Japan", material="NICKEL"),
    ]

    def _nos(self, term):
        return [c.coin_no for c in filter_coins(self.coins, term)]

    def test_matches_coin_no_case_insensitive(self):
        assert self._nos("ab-") == ["AB-12"]

    def test_matches_country(self):
        assert self._nos("Kingdom") == ["zz-1"]

    def test_matches_material(self):
        assert self._nos("nickel") == ["Q7"]

    def test_empty_term_keeps_all(self):
        assert len(self._nos("")) == 3

    def test_no_match(self):
        assert self._nos("peru") == []

    def test_missing_fields_do_not_break(self):
        assert filter_coins([CoinRecord()], "x") == []


class TestCoinListView:
    def test_pages_of_six(self):
        view = CoinListView(_coins(13))
        assert view.total_pages == 3
        assert [c.coin_no for c in view.items] == ["C1", "C2", "C3", "C4", "C5", "C6"]
        view.go_to(3)
        assert [c.coin_no for c in view.items] == ["C13"]

    def test_next_and_prev_stop_at_edges(self):
        view = CoinListView(_coins(7))
        view.prev_page()
        assert view.page == 1
        view.next_page()
        view.next_page()
        assert view.page == 2

    def test_go_to_clamps(self):
        view = CoinListView(_coins(7))
        view.go_to(99)
        assert view.page == 2
        view.go_to(0)
        assert view.page == 1

    def test_search_resets_to_first_page(self):
        coins = _coins(12) + [CoinRecord(coin_no="X1", country="Peru", material="Gold")]
        view = CoinListView(coins)
        view.go_to(3)
        assert view.page == 3
        view.search("peru")
        assert view.page == 1
        assert [c.coin_no for c in view.filtered] == ["X1"]
        assert view.total_pages == 1

    def test_empty_list(self):
        view = CoinListView([])
        assert view.total_pages == 0
        assert view.items == []
        view.next_page()
        assert view.page == 1


class TestFetchCoins:
    def test_default_newest_first(self, store):
        store.add("coins", {"coinNo": "old", "createdAt": "2024-01-01T00:00:00.000Z"})
        store.add("coins", {"coinNo": "new", "createdAt": "2024-06-01T00:00:00.000Z"})
        coins = fetch_coins(store)
        assert [c.coin_no for c in coins] == ["new", "old"]
        assert all(c.id for c in coins)

    def test_sort_by_present_value_ascending(self, store):
        store.add("coins", {"coinNo": "a", "coinPresentValue": "30"})
        store.add("coins", {"coinNo": "b", "coinPresentValue": "100"})
        coins = fetch_coins(store, sort_by="coinPresentValue", order="asc")
        assert [c.coin_no for c in coins] == ["b", "a"]


class TestNextPhotoIndex:
    def test_cycles_forward(self):
        assert next_photo_index(0, 2, "next") == 1
        assert next_photo_index(1, 2, "next") == 0

    def test_cycles_backward(self):
        assert next_photo_index(0, 2, "prev") == 1

    def test_no_photos(self):
        assert next_photo_index(0, 0, "next") == 0
