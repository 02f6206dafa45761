import asyncio
import unittest

import httpx

from app.movies.store import CacheSlot, MovieStore, SlotState, paginate
from support import FakeTMDB, details_payload, paged_payload


def ids(movies):
    return [movie.id for movie in movies]


class PaginationTests(unittest.TestCase):
    def test_slices_twenty_per_page_and_clips(self):
        movies = list(range(45))
        self.assertEqual(paginate(movies, 1), list(range(20)))
        self.assertEqual(paginate(movies, 3), list(range(40, 45)))
        self.assertEqual(paginate(movies, 4), [])


class MovieStoreTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.tmdb = FakeTMDB()
        self.store = MovieStore(self.tmdb.client())

    async def test_popular_cache_hit_issues_one_request(self):
        self.tmdb.add("/movie/popular", paged_payload(list(range(1, 21))))

        first = await self.store.fetch_popular(1)
        second = await self.store.fetch_popular(1)

        self.assertEqual(self.tmdb.calls("/movie/popular"), 1)
        self.assertEqual(ids(first), ids(second))
        self.assertEqual(self.store.slot_state(CacheSlot.POPULAR), SlotState.POPULATED)

    async def test_next_page_appends_only_new_ids(self):
        pages = {
            "1": paged_payload(list(range(1, 21))),
            "2": paged_payload([19, 20, 21, 22], page=2),
        }
        self.tmdb.add("/movie/popular", lambda request: pages[request.url.params["page"]])

        await self.store.fetch_popular(1)
        returned = await self.store.fetch_popular(2)

        self.assertEqual(ids(returned), [19, 20, 21, 22])
        self.assertEqual(ids(self.store.popular_movies), list(range(1, 23)))
        self.assertEqual(self.store.popular_page, 2)
        self.assertEqual(ids(self.store.popular_movies_paginated(2)), [21, 22])

    async def test_load_more_fetches_following_page(self):
        self.tmdb.add("/movie/popular", lambda request: paged_payload(
            [int(request.url.params["page"]) * 100], page=int(request.url.params["page"])))

        await self.store.fetch_popular(1)
        await self.store.load_more_popular()

        self.assertEqual(ids(self.store.popular_movies), [100, 200])
        self.assertEqual(self.store.popular_page, 2)

    async def test_force_refresh_of_first_page_replaces_list_but_keeps_max_page(self):
        responses = iter([
            paged_payload([1, 2]),
            paged_payload([3, 4], page=2),
            paged_payload([9]),
        ])
        self.tmdb.add("/movie/popular", lambda request: next(responses))

        await self.store.fetch_popular(1)
        await self.store.fetch_popular(2)
        await self.store.fetch_popular(1, force_refresh=True)

        self.assertEqual(ids(self.store.popular_movies), [9])
        self.assertEqual(self.store.popular_page, 2)

    async def test_failure_keeps_cache_and_clears_flag(self):
        responses = iter([paged_payload([1, 2]), 503])
        self.tmdb.add("/movie/popular", lambda request: next(responses))
        await self.store.fetch_popular(1)

        with self.assertRaises(httpx.HTTPStatusError):
            await self.store.fetch_popular(1, force_refresh=True)

        self.assertEqual(ids(self.store.popular_movies), [1, 2])
        self.assertFalse(self.store.is_loading_popular)
        self.assertIn("popular movies", self.store.error)
        self.assertEqual(self.store.slot_state(CacheSlot.POPULAR), SlotState.ERROR)

    async def test_loading_flag_is_set_during_request(self):
        seen = []

        def record(request):
            seen.append((self.store.is_loading_popular, self.store.slot_state("popular")))
            return paged_payload([1])

        self.tmdb.add("/movie/popular", record)
        await self.store.fetch_popular(1)

        self.assertEqual(seen, [(True, SlotState.LOADING)])
        self.assertFalse(self.store.is_loading)

    async def test_now_playing_uses_its_own_slot(self):
        self.tmdb.add("/movie/popular", paged_payload([1]))
        self.tmdb.add("/movie/now_playing", lambda request: paged_payload(
            [10, 11] if request.url.params["page"] == "1" else [11, 12], page=int(request.url.params["page"])))

        await self.store.fetch_popular(1)
        await self.store.fetch_now_playing(1)
        await self.store.fetch_now_playing(2)
        cached = await self.store.fetch_now_playing(1)

        self.assertEqual(ids(self.store.now_playing_movies), [10, 11, 12])
        self.assertEqual(ids(cached), [10, 11, 12])
        self.assertEqual(ids(self.store.popular_movies), [1])
        self.assertEqual(self.tmdb.calls("/movie/now_playing"), 2)

    async def test_details_are_cached_until_forced(self):
        titles = iter(["Old title", "New title"])
        self.tmdb.add("/movie/550", lambda request: details_payload(550, title=next(titles)))

        first = await self.store.fetch_movie_details(550)
        again = await self.store.fetch_movie_details(550)
        refreshed = await self.store.fetch_movie_details(550, force_refresh=True)

        self.assertIs(first, again)
        self.assertEqual(refreshed.title, "New title")
        self.assertEqual(self.store.get_movie_by_id(550).title, "New title")
        self.assertEqual(self.tmdb.calls("/movie/550"), 2)
        self.assertEqual(self.store.detail_state(550), SlotState.POPULATED)

    async def test_details_failure_records_error(self):
        with self.assertRaises(httpx.HTTPStatusError):
            await self.store.fetch_movie_details(404)

        self.assertFalse(self.store.is_movie_loaded(404))
        self.assertFalse(self.store.is_loading_details)
        self.assertIn("movie details", self.store.error)
        self.assertEqual(self.store.detail_state(404), SlotState.ERROR)
        self.assertEqual(self.store.detail_state(1), SlotState.EMPTY)

    async def test_new_search_query_resets_results(self):
        self.tmdb.add("/search/movie", lambda request: paged_payload(
            [1, 2] if request.url.params["query"] == "matrix" else [7],
            page=int(request.url.params["page"])))

        await self.store.search_movies("matrix")
        await self.store.search_movies("matrix", 2)
        self.assertEqual(ids(self.store.search_results), [1, 2])
        self.assertEqual(self.store.search_page, 2)

        await self.store.search_movies("alien", 2)

        self.assertEqual(ids(self.store.search_results), [7])
        self.assertEqual(self.store.search_query, "alien")
        self.assertEqual(self.store.search_page, 2)

    async def test_clear_search_and_reset(self):
        self.tmdb.add("/search/movie", paged_payload([1]))
        self.tmdb.add("/movie/popular", paged_payload([2]))
        await self.store.search_movies("matrix")
        await self.store.fetch_popular(1)

        self.store.clear_search()
        self.assertEqual(self.store.search_results, [])
        self.assertEqual(self.store.search_query, "")
        self.assertEqual(self.store.slot_state(CacheSlot.SEARCH), SlotState.EMPTY)

        self.store.reset()
        self.assertEqual(self.store.popular_movies, [])
        self.assertEqual(self.store.popular_page, 0)

    async def test_overlapping_calls_are_not_merged_by_default(self):
        self.tmdb.add("/movie/popular", paged_payload([1]))

        await asyncio.gather(self.store.fetch_popular(1), self.store.fetch_popular(1))

        self.assertEqual(self.tmdb.calls("/movie/popular"), 2)

    async def test_overlapping_calls_share_one_request_when_deduplicated(self):
        store = MovieStore(self.tmdb.client(), dedupe_in_flight=True)
        self.tmdb.add("/movie/popular", paged_payload([1]))
        self.tmdb.add("/movie/7", details_payload(7))

        first, second = await asyncio.gather(store.fetch_popular(1), store.fetch_popular(1))
        await asyncio.gather(store.fetch_movie_details(7), store.fetch_movie_details(7))

        self.assertEqual(ids(first), ids(second))
        self.assertEqual(self.tmdb.calls("/movie/popular"), 1)
        self.assertEqual(self.tmdb.calls("/movie/7"), 1)

    async def test_deduplicated_failure_reaches_every_caller(self):
        store = MovieStore(self.tmdb.client(), dedupe_in_flight=True)
        self.tmdb.add("/movie/popular", 500)

        results = await asyncio.gather(store.fetch_popular(1), store.fetch_popular(1),
                                       return_exceptions=True)

        self.assertTrue(all(isinstance(result, httpx.HTTPStatusError) for result in results))
        self.assertEqual(self.tmdb.calls("/movie/popular"), 1)


if __name__ == "__main__":
    unittest.main()
