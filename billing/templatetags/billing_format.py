from django import template

from billing.formatting import inr, inr_number

register = template.Library()

register.filter('inr', inr)
register.filter('inr_number', inr_number)
