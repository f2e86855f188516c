import pytest

from entity_metadata.adapters.java_adapter import JavaAdapter
from entity_metadata.cir.model import ClassDecl, TypeDecl

ORDER = """
package com.acme;

import com.acme.base.Base;
import java.util.*;
import static java.util.Objects.requireNonNull;

@Table("orders")
public class Order extends Base {

    @Column("id")
    private Long id;

    @Column(value = "total")
    private java.math.BigDecimal total;

    private List<String> tags;

    @Table
    public static class Line {
        @Column("sku")
        private String sku;
    }
}
"""


def test_package_imports_and_markers():
    unit = JavaAdapter().parse(ORDER, source_file="Order.java").unit

    assert unit.package == "com.acme"
    # static imports never name a supertype
    assert unit.imports == ("com.acme.base.Base", "java.util.*")

    order = unit.types[0]
    assert isinstance(order, ClassDecl)
    assert order.qualified_name == "com.acme.Order"
    assert order.extends.name == "Base"
    assert order.has_marker("Table")
    assert order.marker("Table").value == "orders"
    assert order.source_file == "Order.java"


def test_fields_keep_source_order_and_marker_arguments():
    order = JavaAdapter().parse(ORDER).unit.types[0]

    assert [f.name for f in order.fields] == ["id", "total", "tags"]
    total = order.fields[1]
    assert total.marker("Column").arguments == (("value", "total"),)
    assert not order.fields[2].has_marker("Column")


def test_nested_types_are_owned_by_their_parent():
    unit = JavaAdapter().parse(ORDER).unit
    order = unit.types[0]

    line = order.nested_types[0]
    assert line.name == "Line"
    assert line.enclosing == ("Order",)
    assert line.nested_name == "Order.Line"
    # nesting is not part of the qualified name
    assert line.qualified_name == "com.acme.Line"
    assert [t.name for t in unit.iter_types()] == ["Order", "Line"]


def test_interface_and_enum_declarations():
    code = """
    package com.acme;

    public interface Named extends Base, Other {
        String PREFIX = "x";
    }

    enum Status {
        ACTIVE, DELETED;

        @Column("code")
        private int code;
    }
    """
    unit = JavaAdapter().parse(code).unit
    named, status = unit.types

    assert isinstance(named, ClassDecl)
    assert named.kind == "interface"
    assert named.extends.name == "Base"

    assert type(status) is TypeDecl
    assert status.kind == "enum"
    assert [f.name for f in status.fields] == ["code"]


def test_qualified_annotation_and_supertype():
    code = """
    @org.springframework.data.relational.core.mapping.Table("t")
    class Sub extends com.acme.base.Base {}
    """
    sub = JavaAdapter().parse(code).unit.types[0]

    assert sub.package is None
    assert sub.qualified_name == "Sub"
    assert sub.has_marker("Table")
    assert sub.extends.name == "com.acme.base.Base"
    assert sub.extends.simple_name == "Base"


def test_syntax_error_raises_value_error():
    with pytest.raises(ValueError):
        JavaAdapter().parse("public class {")


def test_records_are_not_java_8():
    with pytest.raises(ValueError):
        JavaAdapter().parse('public record RecordEntity(@Column("id") Long id) {}')
