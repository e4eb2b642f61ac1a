import django_filters

from .models import Promotion


class PromotionFilter(django_filters.FilterSet):
    code = django_filters.CharFilter(field_name="code", lookup_expr="icontains")

    class Meta:
        model = Promotion
        fields = {
            "discount_type": ["exact"],
            "is_active": ["exact"],
        }
