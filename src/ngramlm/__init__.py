from ngramlm.token_list import TokenList, UNKNOWN_WORD_TOKEN
from ngramlm.ngram import (NgramModel, NgramModelBuilder, SmoothOptions,
                           get_ngram_model_builder, get_ngram_name)
from ngramlm.corpus import Corpus, create_ngram_models, merge_corpora

__version__ = "0.1.0"
