from pluggy import HookimplMarker

from fgcodegen import plugins
from fgcodegen.filtergraph import catalog, link_graph, Fixed, VariadicOut, Variadic

hookimpl = HookimplMarker("fgcodegen")


def test_builtin_catalog():
    assert "fgcodegen.plugins.catalog_builtin" in plugins.list_plugins()

    hook = plugins.get_hook()
    assert hook.filter_arity(name="scale") == Fixed(1, 1)
    assert hook.filter_arity(name="overlay") == Fixed(2, 1)
    assert hook.filter_arity(name="split") == VariadicOut(1, 1, "outputs")
    assert hook.filter_arity(name="concat") == Variadic(1, 1)
    assert hook.filter_arity(name="nosuchfilter") is None

    assert catalog.lookup("nullsink") == Fixed(1, 0)


class MyFilters:
    @hookimpl
    def filter_arity(self, name):
        return {"myfilter": Fixed(1, 2), "scale": Fixed(1, 3)}.get(name)


def test_register_plugin():
    name = plugins.register(MyFilters(), "my_filters")
    try:
        assert name == "my_filters"
        assert catalog.lookup("myfilter") == Fixed(1, 2)
        # later plugins take precedence
        assert catalog.lookup("scale") == Fixed(1, 3)
        # others fall through to the builtin catalog
        assert catalog.lookup("hflip") == Fixed(1, 1)

        g = link_graph("myfilter[a][b]")
        assert g.filters[0].nb_outputs == 2
    finally:
        plugins.unregister("my_filters")

    assert catalog.lookup("myfilter") is None
    assert catalog.lookup("scale") == Fixed(1, 1)


def test_reinitialize():
    plugins.initialize()
    assert plugins.list_plugins().count("fgcodegen.plugins.catalog_builtin") == 1
