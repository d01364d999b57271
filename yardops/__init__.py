"""YardOps: meter reading compliance for facilities teams."""
