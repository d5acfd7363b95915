#  -*- coding: utf-8 -*-
"""
Tests for MetaBean, MetaProperty, BeanBuilder and MetaModel.
"""

from __future__ import annotations

import pytest

from beanxml import MetaBean, MetaModel, UnknownPropertyError

from sample_beans import Address, Circle, Person, Range, Shape


@pytest.fixture
def meta_model() -> MetaModel:
    return MetaModel()


class TestMetaModel:

    def test_properties_of_keeps_declaration_order(self, meta_model: MetaModel) -> None:
        assert meta_model.properties_of(Circle) == [('name', str), ('radius', float)]

    def test_declared_generic_types(self, meta_model: MetaModel) -> None:
        kinds = dict(meta_model.properties_of(Person))

        assert kinds['addresses'] == list[Address]
        assert kinds['favourite'] is Shape

    def test_meta_beans_are_cached(self, meta_model: MetaModel) -> None:
        assert meta_model.meta_bean(Person) is meta_model.meta_bean(Person)

    def test_is_bean(self, meta_model: MetaModel) -> None:
        assert meta_model.is_bean(Person)
        assert not meta_model.is_bean(int)
        assert not meta_model.is_bean(list[int])

    def test_non_bean_rejected(self, meta_model: MetaModel) -> None:
        with pytest.raises(TypeError, match="not a bean type"):
            meta_model.meta_bean(dict)


class TestMetaBean:

    def test_meta_property_lookup(self) -> None:
        meta_bean = MetaBean(Address)

        assert meta_bean.has_property('street')
        assert meta_bean.meta_property('street').kind is str
        assert meta_bean.meta_property('street').bean_type is Address
        assert meta_bean.property_names == ['street', 'city', 'postcode']
        assert meta_bean.bean_name == 'sample_beans.Address'

    def test_unknown_property(self) -> None:
        with pytest.raises(UnknownPropertyError) as info:
            MetaBean(Address).meta_property('planet')

        assert info.value.property_name == 'planet'
        assert info.value.bean_type == 'sample_beans.Address'

    def test_meta_property_reads_bean(self) -> None:
        address = Address(street='1 Main St')
        assert MetaBean(Address).meta_property('street').get(address) == '1 Main St'


class TestBeanBuilder:

    def test_build(self, meta_model: MetaModel) -> None:
        builder = meta_model.builder_for(Address)
        builder.set('street', '1 Main St').set('city', 'Springfield')

        assert builder.get('street') == '1 Main St'
        assert builder.build() == Address(street='1 Main St', city='Springfield')

    def test_unknown_property_rejected(self, meta_model: MetaModel) -> None:
        with pytest.raises(UnknownPropertyError, match="planet"):
            meta_model.builder_for(Address).set('planet', 'Mars')

    def test_build_only_once(self, meta_model: MetaModel) -> None:
        builder = meta_model.builder_for(Address)
        builder.build()

        with pytest.raises(RuntimeError, match="already been built"):
            builder.build()

    def test_pre_build_hook_runs(self, meta_model: MetaModel) -> None:
        assert meta_model.builder_for(Range).set('low', 4).build() == Range(low=4, high=4)

    def test_validation_rejects_values(self, meta_model: MetaModel) -> None:
        builder = meta_model.builder_for(Range).set_all({'low': 9, 'high': 1})

        with pytest.raises(ValueError):
            builder.build()
