"""
Tally XML document tree.

The ENVELOPE is described as an immutable tree of Element values built in
one expression per block, then handed to the serializer. Nothing here
touches lxml, so documents can be compared and inspected in tests without
parsing text back.
"""

from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

from .ledger_mapping import format_amount
from .models import InventoryEntry, LedgerEntry, Voucher, yes_no
from .options import OutputMode

VOUCHER_VIEW = "Invoice Voucher View"
UDF_NAMESPACE = ("UDF", "TallyUDF")


@dataclass(frozen=True)
class Element:
    """
    One XML element.

    Attributes:
        tag: Element name, e.g. "LEDGERENTRIES.LIST"
        text: Text content (leaf elements only)
        attributes: (name, value) pairs in output order
        children: Child elements in output order
        namespaces: (prefix, uri) declarations made on this element
    """
    tag: str
    text: Optional[str] = None
    attributes: Tuple[Tuple[str, str], ...] = ()
    children: Tuple['Element', ...] = ()
    namespaces: Tuple[Tuple[str, str], ...] = ()

    def find(self, tag: str) -> Optional['Element']:
        """First direct child with the given tag."""
        for child in self.children:
            if child.tag == tag:
                return child
        return None

    def findall(self, tag: str) -> List['Element']:
        """All direct children with the given tag."""
        return [child for child in self.children if child.tag == tag]

    def findtext(self, tag: str) -> Optional[str]:
        child = self.find(tag)
        return child.text if child is not None else None

    def iter(self, tag: Optional[str] = None) -> Iterator['Element']:
        """Depth-first walk over this element and its descendants."""
        if tag is None or self.tag == tag:
            yield self
        for child in self.children:
            yield from child.iter(tag)

    def attribute(self, name: str) -> Optional[str]:
        return dict(self.attributes).get(name)


def element(tag: str, *children: Element, text: Optional[str] = None, **attributes) -> Element:
    """
    Convenience constructor.

    Example:
        >>> element("AMOUNT", text="59")
        Element(tag='AMOUNT', text='59', attributes=(), children=(), namespaces=())
    """
    return Element(
        tag=tag,
        text=text,
        attributes=tuple(attributes.items()),
        children=tuple(children)
    )


def _leaf(tag: str, value) -> Element:
    return Element(tag=tag, text=str(value))


def _ledger_entry(entry: LedgerEntry) -> Element:
    return element(
        "LEDGERENTRIES.LIST",
        _leaf("LEDGERNAME", entry.ledger_name),
        _leaf("ISDEEMEDPOSITIVE", yes_no(entry.is_deemed_positive)),
        _leaf("LEDGERFROMITEM", "No"),
        _leaf("REMOVEZEROENTRIES", "No"),
        _leaf("ISPARTYLEDGER", yes_no(entry.is_party_ledger)),
        _leaf("AMOUNT", format_amount(entry.amount)),
    )


def _inventory_entry(entry: InventoryEntry) -> Element:
    allocation = entry.accounting_allocation
    deemed_positive = yes_no(entry.is_deemed_positive)
    return element(
        "ALLINVENTORYENTRIES.LIST",
        _leaf("STOCKITEMNAME", entry.stock_item_name),
        _leaf("ISDEEMEDPOSITIVE", deemed_positive),
        _leaf("ISLASTDEEMEDPOSITIVE", deemed_positive),
        _leaf("ISAUTONEGATIVE", "No"),
        _leaf("RATE", entry.rate),
        _leaf("ACTUALQTY", entry.actual_qty),
        _leaf("BILLEDQTY", entry.billed_qty),
        _leaf("AMOUNT", format_amount(entry.amount)),
        element(
            "ACCOUNTINGALLOCATIONS.LIST",
            _leaf("LEDGERNAME", allocation.ledger_name),
            _leaf("ISDEEMEDPOSITIVE", yes_no(allocation.is_deemed_positive)),
            _leaf("LEDGERFROMITEM", "No"),
            _leaf("REMOVEZEROENTRIES", "No"),
            _leaf("ISPARTYLEDGER", "No"),
            _leaf("AMOUNT", format_amount(allocation.amount)),
        ),
    )


def _header_fields(voucher: Voucher) -> Tuple[Element, ...]:
    return (
        _leaf("DATE", voucher.date),
        _leaf("VOUCHERTYPENAME", voucher.voucher_type),
        _leaf("VOUCHERNUMBER", voucher.voucher_number),
        _leaf("REFERENCE", voucher.reference),
        _leaf("PARTYLEDGERNAME", voucher.party_ledger_name),
        _leaf("PERSISTEDVIEW", VOUCHER_VIEW),
    )


def _voucher_element(voucher: Voucher, mode: OutputMode) -> Element:
    if mode is OutputMode.MINIMAL:
        body = _header_fields(voucher) + (_leaf("NARRATION", voucher.narration or ""),)
    else:
        body = (
            _header_fields(voucher)
            + (_ledger_entry(voucher.party_entry),)
            + tuple(_inventory_entry(entry) for entry in voucher.inventory_entries)
            + tuple(_ledger_entry(entry) for entry in voucher.tax_entries)
        )

    return Element(
        tag="VOUCHER",
        attributes=(
            ("VCHTYPE", voucher.voucher_type),
            ("ACTION", "Create"),
            ("OBJVIEW", VOUCHER_VIEW),
        ),
        children=body
    )


def build_document(
    voucher: Voucher,
    mode: OutputMode = OutputMode.FULL,
    include_company: bool = True
) -> Element:
    """
    Build the Tally import ENVELOPE for a voucher.

    Args:
        voucher: Voucher to render.
        mode: FULL for party/inventory/tax blocks, MINIMAL for header only.
        include_company: Emit STATICVARIABLES/SVCURRENTCOMPANY.

    Returns:
        Root ENVELOPE element.
    """
    request_desc = [_leaf("REPORTNAME", "Vouchers")]
    if include_company:
        request_desc.append(
            element("STATICVARIABLES", _leaf("SVCURRENTCOMPANY", voucher.company_name))
        )

    tally_message = Element(
        tag="TALLYMESSAGE",
        children=(_voucher_element(voucher, mode),),
        namespaces=(UDF_NAMESPACE,)
    )

    return element(
        "ENVELOPE",
        element("HEADER", _leaf("TALLYREQUEST", "Import Data")),
        element(
            "BODY",
            element(
                "IMPORTDATA",
                element("REQUESTDESC", *request_desc),
                element("REQUESTDATA", tally_message),
            ),
        ),
    )
