from .demodays import (
    CheckFinishedView,
    DemodayCriteriaView,
    DemodayDetailView,
    DemodayListCreateView,
    DemodayStatusView,
)
from .phases import CurrentPhaseView
from .results import ExportView, RankingView, ResultsView, SelectFinalistsView
