from fgcodegen.__main__ import main


def test_cli_commandline(capsys):
    assert main(["ffmpeg", "-i", "in.mp4", "-vf", "scale=320:240", "out.mp4"]) == 0
    out = capsys.readouterr().out
    assert 'avfilter_init_str(filter_scale_0, "320:240");' in out


def test_cli_dashdash(capsys):
    assert main(["--no-narrate", "--", "-i", "in.mp4", "-vf", "hflip", "out.mp4"]) == 0
    out = capsys.readouterr().out
    assert 'avfilter_get_by_name("hflip")' in out
    assert "/*" not in out


def test_cli_graph_to_file(tmp_path):
    path = tmp_path / "graph.c"
    assert main(["-o", str(path), "--function", "build_graph", "-g", "[in]hflip[out]"]) == 0
    code = path.read_text(encoding="utf-8")
    assert code.startswith("\nint build_graph(")
    assert 'input_0->name = av_strdup("in")' in code


def test_cli_rc_file(tmp_path, capsys):
    rcpath = tmp_path / "fgcodegenrc"
    rcpath.write_text("codegen.graph_var: graph  # comment\n", encoding="utf-8")
    assert main(["--rc", str(rcpath), "-g", "hflip"]) == 0
    assert "avfilter_graph_alloc_filter(graph, " in capsys.readouterr().out


def test_cli_errors(capsys, tmp_path):
    path = tmp_path / "graph.c"
    assert main(["-o", str(path), "-g", "scale=320:240,"]) == 1
    err = capsys.readouterr().err
    assert err.startswith("error (parse): empty filter description after trailing ','")
    assert not path.exists()

    assert main(["--dangling", "error", "-g", "overlay"]) == 1
    assert capsys.readouterr().err.startswith("error (resolve): unconnected input pad 1")

    assert main(["-g", "nosuchfilter"]) == 1
    assert capsys.readouterr().err.startswith("error (resolve): No such filter")

    assert main(["--unknown", "passthrough", "-g", "nosuchfilter"]) == 0

    assert main(["--", "-i", "in.mp4", "-vf"]) == 1
    assert capsys.readouterr().err.startswith("error (commandline): Missing argument")
