import pytest

from cut_lens.normalization.repository import TaxonomyRepository
from cut_lens.stores import InMemoryCutStore


@pytest.fixture
def store():
    return InMemoryCutStore()


@pytest.fixture
def seeded_store():
    store = InMemoryCutStore()
    TaxonomyRepository().seed(store)
    return store
