from django.shortcuts import render

from portfolio.auth import is_admin
from projects.market_sectors import MARKET_SECTORS


def home(request):
    """
    Renders the project map.
    """
    return render(request, 'projects/map.html', {
        'sectors': MARKET_SECTORS,
        'is_admin': is_admin(request),
    })
