"""
Sample models shared by the tests.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Annotated, List, Optional

from modeltable import (
    DataList, DataType, Display, DropDownList, HiddenInput, ReadOnly, Required, SelectListItem,
    TableColumn, TableLink, TableRow, read_only, table_display, table_edit, table_link
)


class Status(Enum):
    PENDING = 1
    SHIPPED = 2

    @property
    def display_name(self):
        return self.name.title()


# =============================================================================
# Read-only models
# =============================================================================

@dataclass
class Category:
    id: int = 0
    name: str = ''


@dataclass
class Supplier:
    id: int = 0
    name: str = ''


@table_display(include_row_numbers=True, controller='products',
               details_action='details', edit_action='edit')
@table_link(controller='products')
@dataclass
class Product:
    id: Annotated[int, HiddenInput()] = 0
    name: str = ''
    category: Annotated[Optional[Category], TableColumn(display_property='name')] = None
    supplier: Annotated[Optional[Supplier], TableLink(controller='suppliers')] = None
    price: Annotated[Decimal, Display(format_string='{0:,.2f}'), TableColumn(include_total=True)] = Decimal('0')
    stock: Annotated[int, TableColumn(include_total=True)] = 0
    tags: List[str] = field(default_factory=list)
    internal_code: Annotated[str, TableColumn(exclude=True)] = ''


@dataclass
class Catalog:
    products: List[Product] = field(default_factory=list)


@dataclass
class Address:
    street: str = ''
    city: str = ''


@dataclass
class Customer:
    name: str = ''
    email: Annotated[Optional[str], Display(data_type=DataType.EMAIL_ADDRESS)] = None
    address: Address = field(default_factory=Address)
    active: bool = True


@dataclass
class Sale:
    region: Annotated[str, TableColumn(no_repeat=True)] = ''
    city: Annotated[str, TableColumn(no_repeat=True)] = ''
    product: str = ''
    channel: Annotated[str, TableColumn(no_repeat=True)] = ''


# =============================================================================
# Editable models
# =============================================================================

@table_edit()
@dataclass
class OrderLine(TableRow):
    id: Annotated[int, HiddenInput()] = 0
    description: Annotated[str, Required(), DataList(data_list_property='descriptions')] = ''
    category_id: Annotated[Optional[int], Display(name='Category'),
                           DropDownList(select_list_property='categories', option_label='Select...')] = None
    quantity: Annotated[int, TableColumn(include_total=True)] = 0
    unit_price: Annotated[Decimal, Display(format_string='{0:,.2f}')] = Decimal('0')
    status: Status = Status.PENDING
    urgent: bool = False
    approved: Optional[bool] = None
    notes: Annotated[Optional[str], Display(data_type=DataType.MULTILINE_TEXT)] = None
    sku: Annotated[str, ReadOnly()] = ''


def default_descriptions():
    return ['Widget', 'Gadget']


def default_categories():
    return [SelectListItem(1, 'Tools'), SelectListItem(2, 'Parts')]


@dataclass
class Order:
    lines: List[OrderLine] = field(default_factory=list)
    descriptions: List[str] = field(default_factory=default_descriptions)
    categories: List[SelectListItem] = field(default_factory=default_categories)


def order_line(archived: bool = False, **values) -> OrderLine:
    """Build an OrderLine; TableRow flags are class attributes, so set them after init."""
    line = OrderLine(**values)
    line.is_active = not archived
    return line


@table_edit(allow_additions=False, is_active_property='enabled', is_dirty_property='changed')
@dataclass
class Setting:
    name: Annotated[str, ReadOnly()] = ''
    value: str = ''
    enabled: bool = True
    changed: bool = False


@dataclass
class Preferences:
    settings: List[Setting] = field(default_factory=list)


@table_edit(allow_additions=False, allow_deletions=False)
@dataclass
class Allocation:
    product: Annotated[Optional[Product], TableColumn(display_property='stock', include_total=True)] = None
    note: str = ''


@dataclass
class Plan:
    allocations: List[Allocation] = field(default_factory=list)


@read_only
@dataclass
class AuditEntry:
    action: str = ''
    amount: Annotated[int, TableColumn(include_total=True)] = 0


@dataclass
class AuditLog:
    entries: List[AuditEntry] = field(default_factory=list)


class Measurement:
    value: int

    def __init__(self, value):
        self.value = value


@dataclass
class Readings:
    measurements: List[Measurement] = field(default_factory=list)


# =============================================================================
# Hidden input models
# =============================================================================

@dataclass
class Bar:
    bar_id: Annotated[Optional[int], Required()] = None
    bar_name: Optional[str] = None


@dataclass
class Baz:
    baz_id: Optional[int] = None
    baz_name: Optional[str] = None


@dataclass
class Foo:
    foo_id: int = 0
    foo_name: Optional[str] = None
    bar: Annotated[Optional[Bar], Required()] = None
    baz: Optional[Baz] = None
    bars: List[Bar] = field(default_factory=list)
