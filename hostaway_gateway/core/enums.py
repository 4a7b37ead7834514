from enum import Enum


class PricingPolicy(str, Enum):
    COMPONENT_SUM = "component_sum"
    PERCENTAGE_DISCOUNT = "percentage_discount"

    def __str__(self):
        return self.value


class DiscountScope(str, Enum):
    ACCOMMODATION = "accommodation"
    TOTAL = "total"

    def __str__(self):
        return self.value


class ComponentType(str, Enum):
    ACCOMMODATION = "accommodation"
    DISCOUNT = "discount"

    def __str__(self):
        return self.value
