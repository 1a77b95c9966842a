from app.routers.accounts import router as accounts_router
from app.routers.metric_sets import router as metric_sets_router
from app.routers.standard_metric_sets import router as standard_metric_sets_router
from app.routers.assessments import router as assessments_router
from app.routers.catalog import router as catalog_router
from app.routers.scores import router as scores_router
