from seqtag.context import BOS, NO_TAG, LemmatizerContextGenerator, POSContextGenerator, word_shape


def test_word_shape_classes():
    assert word_shape("dog") == "sh:lower"
    assert word_shape("Dog") == "sh:initcap"
    assert word_shape("NATO") == "sh:allcap"
    assert word_shape("1984") == "sh:num"
    assert word_shape("B52") == "sh:alnum"
    assert word_shape("3.5") == "sh:numpunct"
    assert word_shape("...") == "sh:punct"
    assert word_shape("") == "sh:empty"


def test_pos_context_first_token_uses_sentence_boundary():
    ctx = POSContextGenerator().get_context(0, ["The", "dog"], (), ())

    assert "w=The" in ctx
    assert "lw=the" in ctx
    assert "sh:initcap" in ctx
    assert "w-1=*bos*" in ctx
    assert "w+1=dog" in ctx
    assert f"p={BOS}" in ctx
    assert f"pp={BOS},{BOS}" in ctx


def test_pos_context_reads_outcome_history():
    ctx = POSContextGenerator().get_context(2, ["the", "big", "dog"], (), ("DET", "ADJ"))

    assert "p=ADJ" in ctx
    assert "pp=DET,ADJ" in ctx
    assert "p,w=ADJ,dog" in ctx
    assert "suf=og" in ctx
    assert "pre=do" in ctx


def test_pos_context_is_a_function_of_its_inputs():
    cg = POSContextGenerator()
    args = (1, ["well-known", "B52"], (), ("ADJ",))
    assert cg.get_context(*args) == cg.get_context(*args)
    ctx = cg.get_context(0, ["well-known", "B52"], (), ())
    assert "h" in ctx
    assert "d" not in ctx
    assert "d" in cg.get_context(1, ["well-known", "B52"], (), ("ADJ",))


def test_lemmatizer_context_without_tags():
    ctx = LemmatizerContextGenerator().get_context(0, ["running"], (), ())

    assert "suf=ing" in ctx
    assert f"t,suf={NO_TAG},ing" in ctx
    assert not any(f.startswith("t=") for f in ctx)
    assert f"p,t={BOS},{NO_TAG}" in ctx


def test_lemmatizer_context_with_tags():
    ctx = LemmatizerContextGenerator().get_context(1, ["dogs", "ran"], ("NOUN", "VERB"), ("1|",))

    assert "t=VERB" in ctx
    assert "t-1=NOUN" in ctx
    assert "t+1=*EOS*" in ctx
    assert "t,w=VERB,ran" in ctx
    assert "p=1|" in ctx
    assert "p,t=1|,VERB" in ctx
