"""Tests for the catalog use cases: add, update and deactivate products."""

import pytest

from stockroom.application.add_product import AddProductHandler
from stockroom.application.deactivate_product import DeactivateProductHandler
from stockroom.application.update_product import UpdateProductHandler
from stockroom.domain.exceptions import NotFoundError, ValidationError
from stockroom.domain.model.value_objects import Money
from stockroom.infrastructure.persistence.in_memory import InMemoryUnitOfWork
from tests.fakes import make_store


class TestAddProduct:

    def test_first_product_gets_id_one(self):
        store = make_store(products=[])
        product = AddProductHandler(InMemoryUnitOfWork(store)).handle("Tent", "450.00")

        assert product.id == "1"
        assert product.active
        assert store.products["1"].price == Money.of("450.00")

    def test_ids_continue_after_existing(self):
        store = make_store()
        product = AddProductHandler(InMemoryUnitOfWork(store)).handle(" Tent ", "450")
        assert product.id == "4"
        assert product.name == "Tent"

    def test_duplicate_name_rejected(self):
        store = make_store()
        with pytest.raises(ValidationError, match="already exists"):
            AddProductHandler(InMemoryUnitOfWork(store)).handle("football", "10")
        assert len(store.products) == 3

    def test_blank_name_rejected(self):
        with pytest.raises(ValidationError, match="name is required"):
            AddProductHandler(InMemoryUnitOfWork(make_store())).handle("", "10")

    @pytest.mark.parametrize("price", ["0", "-1", "abc", "1000000"])
    def test_bad_price_rejected(self, price):
        with pytest.raises(ValidationError):
            AddProductHandler(InMemoryUnitOfWork(make_store())).handle("Tent", price)


class TestUpdateProduct:

    def test_price_updated(self):
        store = make_store()
        UpdateProductHandler(InMemoryUnitOfWork(store)).handle("2", "95.00")
        assert store.products["2"].price == Money.of("95.00")

    def test_unknown_product(self):
        with pytest.raises(NotFoundError, match="'42'"):
            UpdateProductHandler(InMemoryUnitOfWork(make_store())).handle("42", "1")

    def test_zero_price_leaves_store_untouched(self):
        store = make_store()
        with pytest.raises(ValidationError):
            UpdateProductHandler(InMemoryUnitOfWork(store)).handle("2", "0")
        assert store.products["2"].price == Money.of("89.50")


class TestDeactivateProduct:

    def test_deactivated(self):
        store = make_store()
        DeactivateProductHandler(InMemoryUnitOfWork(store)).handle("3")
        assert not store.products["3"].active

    def test_already_inactive(self):
        store = make_store()
        handler = DeactivateProductHandler(InMemoryUnitOfWork(store))
        handler.handle("3")
        with pytest.raises(ValidationError, match="already inactive"):
            handler.handle("3")

    def test_unknown_product(self):
        with pytest.raises(NotFoundError):
            DeactivateProductHandler(InMemoryUnitOfWork(make_store())).handle("9")
