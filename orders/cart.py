"""
Cart and pricing rules shared by the session cart and order submission.

Nothing here touches the database: delivery settings are passed in by the
caller, so the same functions price a session cart and a submitted order.
"""
import datetime
from decimal import Decimal, ROUND_HALF_UP

from django.conf import settings


TWO_PLACES = Decimal('0.01')

# Upper bound for the quantity of a single cart or order line
MAX_LINE_QUANTITY = 999


class QuantityLimitError(ValueError):
    """A line would exceed MAX_LINE_QUANTITY units"""

    def __init__(self, item_id, quantity):
        self.item_id = item_id
        self.quantity = quantity
        super().__init__(
            f"Quantity {quantity} for item {item_id} exceeds the limit of {MAX_LINE_QUANTITY}."
        )


class DeliveryWindowError(ValueError):
    """Requested delivery time falls outside the accepted window"""

    def __init__(self, value, start, end):
        self.value = value
        self.start = start
        self.end = end
        super().__init__(
            f"Delivery time {value} is outside the delivery window "
            f"{start:%H:%M}-{end:%H:%M}."
        )


def to_decimal(value):
    if value is None or value == '':
        return Decimal('0')
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def quantize(amount):
    return to_decimal(amount).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


class CartLine:
    """A menu item snapshot (id, name, unit price) with a quantity"""

    def __init__(self, item_id, name, price, quantity=1):
        self.item_id = str(item_id)
        self.name = name
        self.price = None if price is None else to_decimal(price)
        self.quantity = int(quantity)

    @property
    def line_total(self):
        return to_decimal(self.price) * self.quantity

    def to_dict(self):
        return {
            'item_id': self.item_id,
            'name': self.name,
            'price': None if self.price is None else str(self.price),
            'quantity': self.quantity,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(data['item_id'], data.get('name', ''), data.get('price'), data.get('quantity', 1))

    def __eq__(self, other):
        if not isinstance(other, CartLine):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return f"CartLine({self.item_id!r}, qty={self.quantity})"


class Cart:
    """
    Ordered collection of cart lines, at most one line per menu item.

    Quantities never drop below zero; a line whose quantity reaches zero is
    removed.
    """

    def __init__(self, lines=None):
        self._lines = list(lines or [])

    @property
    def lines(self):
        return list(self._lines)

    @property
    def count(self):
        """Total number of units in the cart"""
        return sum(line.quantity for line in self._lines)

    def is_empty(self):
        return not self._lines

    def get_line(self, item_id):
        item_id = str(item_id)
        for line in self._lines:
            if line.item_id == item_id:
                return line
        return None

    def add_item(self, item):
        """Add one unit of `item` (anything with id, name and price)"""
        line = self.get_line(item.id)
        if line is not None:
            if line.quantity >= MAX_LINE_QUANTITY:
                raise QuantityLimitError(line.item_id, line.quantity + 1)
            line.quantity += 1
            return line
        line = CartLine(item.id, item.name, getattr(item, 'price', None), 1)
        self._lines.append(line)
        return line

    def update_quantity(self, item_id, delta):
        """Shift a line's quantity by `delta`; returns the line or None once removed"""
        line = self.get_line(item_id)
        if line is None:
            return None
        quantity = max(0, line.quantity + int(delta))
        if quantity > MAX_LINE_QUANTITY:
            raise QuantityLimitError(line.item_id, quantity)
        line.quantity = quantity
        if line.quantity == 0:
            self._lines.remove(line)
            return None
        return line

    def remove_item(self, item_id):
        line = self.get_line(item_id)
        if line is not None:
            self._lines.remove(line)

    def clear(self):
        self._lines = []

    # Session (de)serialization

    def to_session(self):
        return [line.to_dict() for line in self._lines]

    @classmethod
    def from_session(cls, data):
        lines = []
        for raw in data or []:
            try:
                line = CartLine.from_dict(raw)
            except (KeyError, TypeError, ValueError, ArithmeticError):
                # Corrupt entries are dropped
                continue
            if 0 < line.quantity <= MAX_LINE_QUANTITY:
                lines.append(line)
        return cls(lines)

    def __len__(self):
        return len(self._lines)

    def __iter__(self):
        return iter(self.lines)


def compute_subtotal(lines):
    """Sum of price x quantity; a line without a price counts as zero"""
    return quantize(sum((line.line_total for line in lines), Decimal('0')))


def compute_delivery_fee(subtotal, delivery_settings):
    """
    Delivery fee for a subtotal.

    The fee applies only when delivery pricing is enabled and the subtotal
    reaches the configured minimum.
    """
    if delivery_settings is None or not delivery_settings.is_enabled:
        return quantize(0)
    if to_decimal(subtotal) < to_decimal(delivery_settings.min_order_amount):
        return quantize(0)
    return quantize(delivery_settings.delivery_fee)


def compute_total(lines, delivery_settings):
    subtotal = compute_subtotal(lines)
    return quantize(subtotal + compute_delivery_fee(subtotal, delivery_settings))


def parse_time(value):
    if isinstance(value, datetime.datetime):
        return value.time()
    if isinstance(value, datetime.time):
        return value
    return datetime.datetime.strptime(str(value).strip(), '%H:%M').time()


def delivery_window():
    """(start, end) of the accepted delivery window"""
    return parse_time(settings.DELIVERY_WINDOW_START), parse_time(settings.DELIVERY_WINDOW_END)


def validate_delivery_window(value, start=None, end=None):
    """
    Check that `value` ("HH:MM" or a time) lies in the inclusive window.

    Returns the parsed time. Out-of-range times raise DeliveryWindowError and
    are never clamped.
    """
    if start is None or end is None:
        default_start, default_end = delivery_window()
        start = start or default_start
        end = end or default_end

    requested = parse_time(value)
    if requested < start or requested > end:
        shown = f"{requested:%H:%M:%S}" if requested.second else f"{requested:%H:%M}"
        raise DeliveryWindowError(shown, start, end)
    # Window has minute resolution
    return requested.replace(second=0, microsecond=0)
