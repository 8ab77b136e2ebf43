"""LearnPath - learning track catalog and learner progress API."""
