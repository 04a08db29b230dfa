"""Dashboard view projections: pure functions from domain data to display models"""
