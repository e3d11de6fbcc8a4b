import unittest

from invoice_service.shared.infrastructure.cache.view_cache import InMemoryViewCache


class TestInMemoryViewCache(unittest.IsolatedAsyncioTestCase):
    async def test_renders_once_until_revalidated(self) -> None:
        cache = InMemoryViewCache()
        renders = 0

        async def render() -> list[str]:
            nonlocal renders
            renders += 1
            return [f"render-{renders}"]

        first = await cache.get_or_render("/dashboard/invoices", "", render)
        second = await cache.get_or_render("/dashboard/invoices", "", render)
        await cache.revalidate_path("/dashboard/invoices")
        third = await cache.get_or_render("/dashboard/invoices", "", render)

        self.assertEqual(first, ["render-1"])
        self.assertEqual(second, ["render-1"])
        self.assertEqual(third, ["render-2"])

    async def test_revalidate_drops_every_variant_of_a_path(self) -> None:
        cache = InMemoryViewCache()

        async def render() -> str:
            return "view"

        await cache.get_or_render("/dashboard/invoices", "", render)
        await cache.get_or_render("/dashboard/invoices", "c1", render)
        await cache.get_or_render("/dashboard/customers", "", render)
        await cache.revalidate_path("/dashboard/invoices")

        self.assertFalse(cache.is_cached("/dashboard/invoices"))
        self.assertFalse(cache.is_cached("/dashboard/invoices", "c1"))
        self.assertTrue(cache.is_cached("/dashboard/customers"))

    async def test_variants_per_path_are_capped_oldest_first(self) -> None:
        cache = InMemoryViewCache(max_variants_per_path=2)

        async def render() -> str:
            return "view"

        for customer_id in ("c1", "c2", "c3"):
            await cache.get_or_render("/dashboard/invoices", customer_id, render)

        self.assertFalse(cache.is_cached("/dashboard/invoices", "c1"))
        self.assertTrue(cache.is_cached("/dashboard/invoices", "c2"))
        self.assertTrue(cache.is_cached("/dashboard/invoices", "c3"))

    async def test_render_racing_a_revalidation_is_not_cached(self) -> None:
        cache = InMemoryViewCache()

        async def render() -> str:
            await cache.revalidate_path("/dashboard/invoices")
            return "stale"

        result = await cache.get_or_render("/dashboard/invoices", "", render)

        self.assertEqual(result, "stale")
        self.assertFalse(cache.is_cached("/dashboard/invoices"))


if __name__ == "__main__":
    unittest.main()
