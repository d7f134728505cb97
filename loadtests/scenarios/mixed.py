"""Mixed workload scenario.

Combines the catalogue and ordering journeys with weights that model
realistic storefront traffic. This is the recommended scenario for load
baseline testing.
"""

from locust import HttpUser, between

from loadtests.scenarios.catalogue import CatalogueBrowsing, ProductImageLifecycle
from loadtests.scenarios.ordering import OrderLifecycleJourney


class MixedWorkloadUser(HttpUser):
    """Realistic mixed workload simulating concurrent storefront activity.

    Browsing (60%): most traffic is shoppers reading the catalogue.
    Ordering (30%): checkout followed by back-office status updates.
    Catalogue writes (10%): sellers uploading and replacing images.
    """

    wait_time = between(0.5, 3.0)
    tasks = {
        CatalogueBrowsing: 6,
        OrderLifecycleJourney: 3,
        ProductImageLifecycle: 1,
    }
