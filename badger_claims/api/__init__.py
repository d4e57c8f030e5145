"""HTTP surface: claim endpoints, catalog reads, health and metrics"""
