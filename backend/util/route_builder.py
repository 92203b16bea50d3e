"""Fluent-style helper for defining Flask routes on a Blueprint."""


class RouteBuilder:
    """Route builder with a chainable API.

    Example
    -------
    >>> RouteBuilder(bp).route('/users').methods('GET').handler(list_users).build()
    """
    def __init__(self, blueprint):
        """
        Parameters
        ----------
        blueprint : flask.Blueprint
            The Flask Blueprint where the route will be registered.
        """
        self.bp = blueprint
        self._rule = None
        self._endpoint = None
        self._methods = ('GET',)
        self._handler = None

    def route(self, rule, endpoint=None):
        """
        Set the route path and optional endpoint name.

        Parameters
        ----------
        rule : str
            The URL rule (e.g., "/users/login").
        endpoint : str, optional
            Custom endpoint name. Defaults to the handler function name.
        """
        self._rule = rule
        self._endpoint = endpoint
        return self

    def methods(self, *methods):
        """Define allowed HTTP methods for the route (e.g. "GET", "POST")."""
        self._methods = tuple(m.upper() for m in methods)
        return self

    def handler(self, func):
        """Set the view function for the route."""
        self._handler = func
        return self

    def build(self):
        """
        Finalize and register the route with the Blueprint.

        Raises
        ------
        ValueError
            If no rule or handler was set.

        Returns
        -------
        RouteBuilder
            Self, after the route is added.
        """
        if self._rule is None or self._handler is None:
            raise ValueError("RouteBuilder needs both route() and handler() before build()")
        self.bp.add_url_rule(
            self._rule,
            endpoint=self._endpoint or self._handler.__name__,
            view_func=self._handler,
            methods=list(self._methods)
        )
        return self
