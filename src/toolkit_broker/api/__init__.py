# API package
# HTTP routers for the toolkit broker
