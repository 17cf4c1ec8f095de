import random

from itemforge.rng import SEED_BITS, derive_seed, make_rng, next_seed


def test_derive_seed_stable():
    assert derive_seed(42, 0, "rusted_sword") == derive_seed(42, 0, "rusted_sword")


def test_derive_seed_discriminates():
    seeds = {derive_seed(42, i, "rusted_sword") for i in range(50)}
    assert len(seeds) == 50
    assert derive_seed(42, "a") != derive_seed(43, "a")
    assert derive_seed(1, "ab") != derive_seed(1, "a", "b")


def test_derive_seed_width():
    for i in range(100):
        assert 0 <= derive_seed(i, "x") < 2 ** SEED_BITS


def test_make_rng():
    rng = random.Random(1)
    assert make_rng(5, rng) is rng
    assert make_rng(5).random() == make_rng(5).random()
    assert isinstance(make_rng(), random.Random)


def test_next_seed_follows_generator():
    a, b = random.Random(3), random.Random(3)
    assert [next_seed(a) for _ in range(5)] == [next_seed(b) for _ in range(5)]
